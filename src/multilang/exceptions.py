"""Exceptions for multilang.

Content resolution never raises: unknown keys, broken dictionaries and
malformed directives all degrade to visible fallbacks. The exceptions here
are raised only at the edges that are allowed to fail loudly, such as
loading an operator configuration file or waiting on a file lock.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class MultilangError(Exception):
    """Base exception for multilang errors.

    Attributes:
        message: Human-readable error message.
        details: Additional error details.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary."""
        return {
            "error": type(self).__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigError(MultilangError):
    """Configuration file could not be read or failed validation."""

    pass


class LockTimeout(MultilangError):
    """A file lock could not be acquired within the timeout."""

    def __init__(self, path: Path | str, timeout: float) -> None:
        self.path = Path(path)
        self.timeout = timeout
        super().__init__(
            f"Timed out after {timeout}s waiting for lock on {path}",
            {"path": str(path), "timeout": timeout},
        )
