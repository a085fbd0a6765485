"""Logging setup for the ``paks`` logger hierarchy."""

from __future__ import annotations

import logging
import re
import sys
from typing import TextIO

from paks.config.logging_config import LoggingConfig

_ROOT_LOGGER = "paks"
_PLAIN_FORMAT = "%(levelname)s %(name)s: %(message)s"

_SENSITIVE_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"(Bearer\s+)[A-Za-z0-9._~+/=-]+", re.IGNORECASE), r"\1[REDACTED]"),
    (re.compile(r"((?:token|api_key|secret)[\"']?\s*[=:]\s*[\"']?)[^\s\"',&]+", re.IGNORECASE), r"\1[REDACTED]"),
)


class SensitiveDataFilter(logging.Filter):
    """Mask bearer tokens and ``token=...`` values in log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = message
        for pattern, replacement in _SENSITIVE_PATTERNS:
            redacted = pattern.sub(replacement, redacted)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


class StructuredFormatter(logging.Formatter):
    """Format records as ``key=value`` pairs on a single line."""

    def format(self, record: logging.LogRecord) -> str:
        fields = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        line = " ".join(f"{key}={_quote(value)}" for key, value in fields.items())
        if record.exc_info:
            line += " exc=" + _quote(self.formatException(record.exc_info))
        return line


def _quote(value: str) -> str:
    if not value or any(ch.isspace() or ch in "\"=" for ch in value):
        return '"' + value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n") + '"'
    return value


def setup_logging(
    config: LoggingConfig | None = None,
    *,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure the ``paks`` logger.

    Replaces any handlers previously installed by this function, so it is
    safe to call once per CLI invocation.

    Args:
        config: Logging configuration (defaults to ``LoggingConfig()``).
        stream: Output stream, defaults to stderr.

    Returns:
        The configured ``paks`` logger.
    """
    config = config or LoggingConfig()
    logger = logging.getLogger(_ROOT_LOGGER)
    logger.setLevel(config.level)

    for handler in list(logger.handlers):
        if getattr(handler, "_paks_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler._paks_handler = True  # type: ignore[attr-defined]
    handler.setFormatter(
        StructuredFormatter() if config.structured else logging.Formatter(_PLAIN_FORMAT)
    )
    if config.redact_sensitive:
        handler.addFilter(SensitiveDataFilter())

    logger.addHandler(handler)
    logger.propagate = False
    return logger
