"""PII-safe logging utilities.

Form values typed by end users (names, phone numbers, ID numbers) must never
reach the logs. Call sites log geometry, counts and template kinds as keyword
arguments, and the formatter redacts anything that still looks like personal
data.
"""

import logging
import re
import sys
from typing import Any

from src.config import get_settings

# Patterns that may contain personal data - these will be redacted
PII_PATTERNS = [
    # Email addresses
    (r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b", "[REDACTED-EMAIL]"),
    # Indian national ID (Aadhaar) style numbers
    (r"\b\d{4}\s\d{4}\s\d{4}\b", "[REDACTED-ID]"),
    # PAN card numbers
    (r"\b[A-Z]{5}\d{4}[A-Z]\b", "[REDACTED-ID]"),
    # Phone numbers
    (r"(?<!\d)(?:\+?\d{1,3}[-.\s]?)?\d{3,5}[-.\s]?\d{3}[-.\s]?\d{4}(?!\d)", "[REDACTED-PHONE]"),
    # Dates of birth (various formats)
    (r"\b\d{1,2}[/-]\d{1,2}[/-]\d{2,4}\b", "[REDACTED-DATE]"),
]


class PIISafeFormatter(logging.Formatter):
    """Formatter that redacts personal data from log messages."""

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        redact_pii: bool = True,
    ):
        super().__init__(fmt, datefmt)
        self.redact_pii = redact_pii
        self._compiled_patterns = [(re.compile(p), r) for p, r in PII_PATTERNS]

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record, redacting personal data if enabled."""
        message = super().format(record)

        if self.redact_pii:
            message = self._redact(message)

        return message

    def _redact(self, text: str) -> str:
        for pattern, replacement in self._compiled_patterns:
            text = pattern.sub(replacement, text)
        return text


class PIISafeLogger:
    """Logger wrapper with structured keyword context.

    Usage:
        logger = get_logger(__name__)
        logger.info("Template loaded", kind="png", width=1000, height=1400)

    Never pass field values or template bytes; use counts and extents.
    """

    def __init__(self, name: str):
        self._logger = logging.getLogger(name)
        self._setup_handler()

    def _setup_handler(self) -> None:
        if not self._logger.handlers:
            settings = get_settings()

            handler = logging.StreamHandler(sys.stdout)
            handler.setLevel(settings.log_level)

            # JSON-like lines in production, readable lines in development
            if settings.is_production:
                fmt = '{"time": "%(asctime)s", "level": "%(levelname)s", "name": "%(name)s", "message": "%(message)s"}'
            else:
                fmt = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

            handler.setFormatter(PIISafeFormatter(fmt, redact_pii=True))
            self._logger.addHandler(handler)
            self._logger.setLevel(settings.log_level)

    def _format_kwargs(self, kwargs: dict[str, Any]) -> str:
        if not kwargs:
            return ""
        return " | " + " ".join(f"{k}={v}" for k, v in kwargs.items())

    def debug(self, message: str, **kwargs: Any) -> None:
        self._logger.debug(f"{message}{self._format_kwargs(kwargs)}")

    def info(self, message: str, **kwargs: Any) -> None:
        self._logger.info(f"{message}{self._format_kwargs(kwargs)}")

    def warning(self, message: str, **kwargs: Any) -> None:
        self._logger.warning(f"{message}{self._format_kwargs(kwargs)}")

    def error(self, message: str, **kwargs: Any) -> None:
        self._logger.error(f"{message}{self._format_kwargs(kwargs)}")

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log exception with traceback."""
        self._logger.exception(f"{message}{self._format_kwargs(kwargs)}")


def get_logger(name: str) -> PIISafeLogger:
    """Get a PII-safe logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        PIISafeLogger instance
    """
    return PIISafeLogger(name)
