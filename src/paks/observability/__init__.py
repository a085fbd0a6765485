"""Logging utilities."""

from paks.observability.logging import (
    SensitiveDataFilter,
    StructuredFormatter,
    setup_logging,
)

__all__ = [
    "SensitiveDataFilter",
    "StructuredFormatter",
    "setup_logging",
]
