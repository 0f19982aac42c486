"""
orderguard Logging
==================

Process-wide logging for orderguard: a ``rich`` console handler whose
highlighter picks out order hashes, addresses and rejection kinds, plus an
optional rotating log file.

Settings come from ``orderguard.constants`` (``.env`` with built-in defaults)
and are applied once, on the first ``get_logger`` call.

Usage:
    >>> from orderguard.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("Order 0x... rejected: ORDER_FILL_EXPIRED")
"""

import logging
import logging.handlers
import re
import sys
import threading
import time
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.highlighter import RegexHighlighter
from rich.logging import RichHandler
from rich.theme import Theme

from .constants import (
    LOG_BACKUP_COUNT,
    LOG_CONSOLE_HIGHLIGHTING,
    LOG_DATE_FORMAT,
    LOG_FILE_OUTPUT,
    LOG_FORMAT,
    LOG_LEVEL,
    LOG_MAX_FILE_SIZE,
)

LOG_FILE_PATH = Path(__file__).parent.parent / "logs" / "orderguard.log"

# Libraries whose INFO output would drown validation logs
QUIET_LIBRARIES = ("httpx", "httpcore")

THEME = Theme({
    "orderguard.hash":        "bold cyan",
    "orderguard.address":     "cyan",
    "orderguard.error_kind":  "bold red",
    "orderguard.amount":      "yellow",
    "orderguard.tag":         "bold magenta",
    "orderguard.logger_name": "magenta",
    "orderguard.level_debug": "dim",
    "orderguard.level_info":  "green",
    "orderguard.level_warn":  "bold yellow",
    "orderguard.level_error": "bold red",
    "orderguard.url":         "underline cyan",
})


class OrderGuardLogHighlighter(RegexHighlighter):
    """Colours order hashes, addresses and ``ORDER_FILL_EXPIRED``-style kinds."""

    base_style = "orderguard."
    highlights = [
        r"(?P<hash>\b0x[0-9a-fA-F]{64}\b)",
        r"(?P<address>\b0x[0-9a-fA-F]{40}\b)",
        r"(?P<error_kind>\b(?:ORDER|INSUFFICIENT|MULTIPLE|BATCH|TRANSACTION|INVALID|FILL)_[A-Z_]+\b)",
        r"(?P<tag>\[[A-Z]+\])",
        r"\s-\s(?P<logger_name>orderguard[\w.]*)\s-\s",
        r"(?P<level_debug>\bDEBUG\b)",
        r"(?P<level_info>\bINFO\b)",
        r"(?P<level_warn>\bWARNING\b)",
        r"(?P<level_error>\b(?:ERROR|CRITICAL)\b)",
        r"(?P<url>https?://\S+)",
    ]


class TerminalSafeFormatter(logging.Formatter):
    """
    Strips ANSI escapes and control characters from formatted records.

    Relayer-supplied order data ends up in log lines, and must not be able
    to move the cursor or recolour the terminal.
    """

    _unsafe = re.compile(
        r"\x1b\[[0-?]*[ -/]*[@-~]"      # CSI sequences
        r"|\x1b[@-Z\\-_]"               # lone escapes
        r"|[\x00-\x08\x0B-\x1F\x7F]"    # controls except tab and newline
    )

    @classmethod
    def sanitize(cls, text: str) -> str:
        return cls._unsafe.sub("", text) if text else text

    def format(self, record: logging.LogRecord) -> str:
        return self.sanitize(super().format(record))


def _usable_format(log_format: str) -> str:
    """The configured format if a sample record renders with it, else the default."""
    try:
        logging.Formatter(fmt=str(log_format)).format(
            logging.makeLogRecord({"msg": "probe", "levelname": "INFO", "name": "probe"})
        )
        return str(log_format)
    except (ValueError, TypeError, KeyError) as e:
        print(f"orderguard.logger: invalid LOG_FORMAT ({e}), using default", file=sys.stderr)
        return str(LOG_FORMAT.default())


class LogManager:
    """
    Singleton owner of the root logger's handlers.

    ``configure`` runs once per process; later calls are no-ops, and
    ``set_level`` adjusts the level afterwards.
    """

    _instance: Optional["LogManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "LogManager":
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    instance = super().__new__(cls)
                    instance._configured = False
                    cls._instance = instance
        return cls._instance

    @property
    def is_configured(self) -> bool:
        return self._configured

    def configure(
        self,
        log_level: Optional[str] = None,
        log_file: Optional[Path] = None,
        file_output: Optional[bool] = None,
    ) -> None:
        """
        Install console and (optionally) file handlers on the root logger.

        Args:
            log_level: Level name; defaults to ``LOG_LEVEL``
            log_file: Rotating log file path; defaults to ``logs/orderguard.log``
            file_output: Write the log file; defaults to ``LOG_FILE_OUTPUT``
        """
        with self._lock:
            if self._configured:
                return

            level = getattr(logging, str(log_level or LOG_LEVEL).upper(), logging.INFO)
            root = logging.getLogger()
            root.handlers.clear()
            root.setLevel(level)
            for name in QUIET_LIBRARIES:
                logging.getLogger(name).setLevel(logging.WARNING)

            date_format = str(LOG_DATE_FORMAT) or str(LOG_DATE_FORMAT.default())
            formatter = TerminalSafeFormatter(fmt=_usable_format(LOG_FORMAT), datefmt=date_format + " UTC")
            formatter.converter = time.gmtime

            if LOG_CONSOLE_HIGHLIGHTING:
                console_handler = RichHandler(
                    console=Console(theme=THEME, highlight=False, stderr=True),
                    highlighter=OrderGuardLogHighlighter(),
                    keywords=[],
                    rich_tracebacks=True,
                    show_time=False,
                    show_level=False,
                    show_path=False,
                    markup=False,
                )
            else:
                console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(formatter)
            root.addHandler(console_handler)

            if file_output if file_output is not None else bool(LOG_FILE_OUTPUT):
                path = log_file or LOG_FILE_PATH
                path.parent.mkdir(parents=True, exist_ok=True)
                file_handler = logging.handlers.RotatingFileHandler(
                    filename=str(path),
                    maxBytes=LOG_MAX_FILE_SIZE,
                    backupCount=LOG_BACKUP_COUNT,
                    encoding="utf-8",
                )
                file_handler.setFormatter(formatter)
                root.addHandler(file_handler)

            self._configured = True

    def set_level(self, log_level: str) -> None:
        """Change the root level after configuration (e.g. from config.toml)."""
        if not self._configured:
            self.configure(log_level=log_level)
            return
        logging.getLogger().setLevel(getattr(logging, str(log_level).upper(), logging.INFO))

    def get_logger(self, name: str) -> logging.Logger:
        if not self._configured:
            self.configure()
        return logging.getLogger(name)


_manager = LogManager()


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name``, configuring orderguard logging on first use."""
    return _manager.get_logger(name)
