"""
orderguard Configuration

Loads config.toml; environment variables override TOML values.
"""

from .loader import (
    OrderGuardConfig,
    ExchangeSectionConfig,
    RpcSectionConfig,
    ValidationSectionConfig,
    LoggingSectionConfig,
    load_config,
)

__all__ = [
    "OrderGuardConfig",
    "ExchangeSectionConfig",
    "RpcSectionConfig",
    "ValidationSectionConfig",
    "LoggingSectionConfig",
    "load_config",
]
