"""
orderguard Constants

Protocol values shared with the deployed exchange contract, plus logger
settings read from ``.env``.
"""
import re
from typing import Dict, Optional

from dotenv import dotenv_values

# ==================================================================================
# PROTOCOL CONSTANTS
# ==================================================================================
# These mirror the exchange contract; local validation is only useful while
# they agree with it.

NULL_ADDRESS = '0x' + '00' * 20

UINT256_BITS = 256
MAX_UINT256 = 2 ** UINT256_BITS - 1

ORDER_HASH_LENGTH = 32
SIGNATURE_COMPONENT_LENGTH = 32
VALID_V_VALUES = (27, 28)

# 1000 parts per million == 0.1%
ROUNDING_ERROR_SCALE = 1_000_000
MAX_ROUNDING_ERROR_PPM = 1_000

PERSONAL_MESSAGE_PREFIX = b'\x19Ethereum Signed Message:\n32'

VALID_ORDER_HASH_PATTERN = re.compile(r'^0x[0-9a-fA-F]{64}$')
VALID_ADDRESS_PATTERN = re.compile(r'^0x[0-9a-fA-F]{40}$')


# ==================================================================================
# LOGGER SETTINGS (.env, falling back to the defaults below)
# ==================================================================================
LOG_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
LOG_BACKUP_COUNT = 5

LOGGER_DEFAULTS: Dict[str, str] = {
    'LOG_LEVEL':                'INFO',
    'LOG_FORMAT':               '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    'LOG_DATE_FORMAT':          '%Y-%m-%dT%H:%M:%S',
    'LOG_CONSOLE_HIGHLIGHTING': 'True',
    'LOG_FILE_OUTPUT':          'False',
}

_env: Dict[str, Optional[str]] = dotenv_values(".env")


class ConfigString(str):
    """A setting string that remembers its built-in default."""

    def __new__(cls, value: str, default: str):
        obj = super().__new__(cls, value)
        obj._default = default
        return obj

    def default(self) -> str:
        return self._default


class ConfigBool(int):
    """A boolean setting (an int, like ``bool``) that remembers its built-in default."""

    def __new__(cls, value: bool, default: bool):
        obj = super().__new__(cls, bool(value))
        obj._default = default
        return obj

    def default(self) -> bool:
        return self._default

    def __repr__(self) -> str:
        return repr(bool(self))

    __str__ = __repr__

    def __eq__(self, other) -> bool:
        return bool(self) == other

    __hash__ = int.__hash__


def parse_bool(value: str) -> Optional[bool]:
    """``"true"``/``"false"`` in any case to a bool; anything else to None."""
    folded = value.strip().casefold()
    if folded == "true":
        return True
    if folded == "false":
        return False
    return None


def _string_setting(key: str) -> ConfigString:
    default = LOGGER_DEFAULTS[key]
    raw = _env.get(key)
    return ConfigString(default if raw is None else raw, default)


def _bool_setting(key: str) -> ConfigBool:
    default = parse_bool(LOGGER_DEFAULTS[key])
    raw = _env.get(key)
    value = parse_bool(raw) if raw is not None else None
    return ConfigBool(default if value is None else value, default)


LOG_LEVEL = _string_setting('LOG_LEVEL')
LOG_FORMAT = _string_setting('LOG_FORMAT')
LOG_DATE_FORMAT = _string_setting('LOG_DATE_FORMAT')
LOG_CONSOLE_HIGHLIGHTING = _bool_setting('LOG_CONSOLE_HIGHLIGHTING')
LOG_FILE_OUTPUT = _bool_setting('LOG_FILE_OUTPUT')
