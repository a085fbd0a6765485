"""Logging configuration."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class LoggingConfig(BaseModel):
    """Logging settings for the ``paks`` logger.

    Attributes:
        level: Log level name.
        structured: Emit ``key=value`` records instead of plain text.
        redact_sensitive: Mask tokens in log messages.
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Log level",
    )
    structured: bool = Field(
        default=False,
        description="Emit key=value formatted records",
    )
    redact_sensitive: bool = Field(
        default=True,
        description="Mask bearer tokens and token values in log output",
    )
