"""
orderguard TOML Configuration Loader

Loads config.toml with environment variable overrides.

Environment variable mapping:
    [exchange] address               → ORDERGUARD_EXCHANGE_ADDRESS
    [exchange] token_transfer_proxy  → ORDERGUARD_TOKEN_TRANSFER_PROXY
    [exchange] fee_token             → ORDERGUARD_FEE_TOKEN
    [rpc] url                        → ORDERGUARD_RPC_URL
    [rpc] timeout                    → ORDERGUARD_RPC_TIMEOUT
    [validation] signature_strategy  → ORDERGUARD_SIGNATURE_STRATEGY
    [logging] level                  → ORDERGUARD_LOG_LEVEL
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import tomllib as tomli  # Python 3.11+
except ImportError:
    import tomli  # type: ignore[no-redef]

from ..crypto.address import is_valid_address
from ..exceptions import ConfigurationError
from ..exchange.signature import SIGNATURE_STRATEGY_CONTRACT, SIGNATURE_STRATEGY_LOCAL

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# ---------------------------------------------------------------------------
# Section dataclasses, one per [section] of config.example.toml
# ---------------------------------------------------------------------------


@dataclass
class ExchangeSectionConfig:
    """[exchange] section. Empty addresses are read from the exchange contract."""
    address: str = ""
    token_transfer_proxy: str = ""
    fee_token: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExchangeSectionConfig":
        return cls(
            address=data.get("address", ""),
            token_transfer_proxy=data.get("token_transfer_proxy", ""),
            fee_token=data.get("fee_token", ""),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("ORDERGUARD_EXCHANGE_ADDRESS"):
            self.address = v
        if v := os.environ.get("ORDERGUARD_TOKEN_TRANSFER_PROXY"):
            self.token_transfer_proxy = v
        if v := os.environ.get("ORDERGUARD_FEE_TOKEN"):
            self.fee_token = v

    def validate(self) -> None:
        if not self.address:
            raise ConfigurationError("exchange.address must be set")
        for name in ("address", "token_transfer_proxy", "fee_token"):
            value = getattr(self, name)
            if value and not is_valid_address(value):
                raise ConfigurationError(f"Invalid exchange.{name}: {value}")


@dataclass
class RpcSectionConfig:
    """[rpc] section."""
    url: str = "http://127.0.0.1:8545"
    timeout: float = 10.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RpcSectionConfig":
        return cls(
            url=data.get("url", "http://127.0.0.1:8545"),
            timeout=float(data.get("timeout", 10.0)),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("ORDERGUARD_RPC_URL"):
            self.url = v
        if v := os.environ.get("ORDERGUARD_RPC_TIMEOUT"):
            self.timeout = float(v)

    def validate(self) -> None:
        if not self.url.startswith(("http://", "https://")):
            raise ConfigurationError(f"rpc.url must be an http(s) URL: {self.url}")
        if self.timeout <= 0:
            raise ConfigurationError("rpc.timeout must be > 0")


@dataclass
class ValidationSectionConfig:
    """[validation] section."""
    signature_strategy: str = SIGNATURE_STRATEGY_LOCAL

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ValidationSectionConfig":
        return cls(
            signature_strategy=data.get("signature_strategy", SIGNATURE_STRATEGY_LOCAL),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("ORDERGUARD_SIGNATURE_STRATEGY"):
            self.signature_strategy = v

    def validate(self) -> None:
        if self.signature_strategy not in (SIGNATURE_STRATEGY_LOCAL, SIGNATURE_STRATEGY_CONTRACT):
            raise ConfigurationError(
                f"Invalid validation.signature_strategy: {self.signature_strategy}"
            )


@dataclass
class LoggingSectionConfig:
    """[logging] section."""
    level: str = "INFO"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingSectionConfig":
        return cls(
            level=data.get("level", "INFO"),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("ORDERGUARD_LOG_LEVEL"):
            self.level = v

    def validate(self) -> None:
        if self.level.upper() not in VALID_LOG_LEVELS:
            raise ConfigurationError(f"Invalid logging.level: {self.level}")


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------


@dataclass
class OrderGuardConfig:
    """All sections of config.toml."""
    exchange: ExchangeSectionConfig = field(default_factory=ExchangeSectionConfig)
    rpc: RpcSectionConfig = field(default_factory=RpcSectionConfig)
    validation: ValidationSectionConfig = field(default_factory=ValidationSectionConfig)
    logging: LoggingSectionConfig = field(default_factory=LoggingSectionConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OrderGuardConfig":
        return cls(
            exchange=ExchangeSectionConfig.from_dict(data.get("exchange", {})),
            rpc=RpcSectionConfig.from_dict(data.get("rpc", {})),
            validation=ValidationSectionConfig.from_dict(data.get("validation", {})),
            logging=LoggingSectionConfig.from_dict(data.get("logging", {})),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "OrderGuardConfig":
        """
        Load configuration from a TOML file.

        A missing file is not an error: defaults plus environment
        overrides are returned.

        Args:
            config_path: Path to config.toml

        Returns:
            OrderGuardConfig instance
        """
        path = Path(config_path)
        if not path.exists():
            logger.warning("Config file not found: %s, using defaults", config_path)
            cfg = cls()
            cfg.apply_env()
            return cfg

        with open(path, "rb") as f:
            try:
                raw = tomli.load(f)
            except tomli.TOMLDecodeError as e:
                raise ConfigurationError(f"Malformed config file {config_path}: {e}") from e

        cfg = cls.from_dict(raw)
        cfg.apply_env()
        return cfg

    # --- env overrides ----------------------------------------------------

    def apply_env(self) -> None:
        """Apply environment variable overrides to all sections."""
        self.exchange.apply_env()
        self.rpc.apply_env()
        self.validation.apply_env()
        self.logging.apply_env()

    # --- validation -------------------------------------------------------

    def validate(self) -> bool:
        """
        Validate all configuration sections.

        Returns:
            True if all valid

        Raises:
            ConfigurationError: on invalid config
        """
        self.exchange.validate()
        self.rpc.validate()
        self.validation.validate()
        self.logging.validate()
        return True

    # --- serialisation ----------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict (for diagnostics, NOT for re-creating TOML)."""
        return {
            "exchange": {
                "address": self.exchange.address,
                "token_transfer_proxy": self.exchange.token_transfer_proxy,
                "fee_token": self.exchange.fee_token,
            },
            "rpc": {
                "url": self.rpc.url,
                "timeout": self.rpc.timeout,
            },
            "validation": {
                "signature_strategy": self.validation.signature_strategy,
            },
            "logging": {
                "level": self.logging.level,
            },
        }


# -----------------------------------------------------------------------
# Convenience function
# -----------------------------------------------------------------------

def load_config(path: Optional[str] = None) -> OrderGuardConfig:
    """
    Load orderguard configuration.

    Resolution order:
        1. Explicit *path* argument
        2. ORDERGUARD_CONFIG env var
        3. ./config.toml in current directory
        4. Defaults (with env overrides)
    """
    if path is None:
        path = os.environ.get("ORDERGUARD_CONFIG", "config.toml")

    return OrderGuardConfig.from_file(path)
