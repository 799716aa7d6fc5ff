"""Error types shared by the scanner engine and CLI."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when a run cannot start: bad project root or empty rule set."""


class ReportWriteError(RuntimeError):
    """Raised when the report artifact cannot be persisted."""
