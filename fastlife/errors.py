"""Exception types raised by the FastLife core."""

from __future__ import annotations

from pathlib import Path


class FastLifeError(Exception):
    """Base class for all FastLife errors."""


class PersistenceError(FastLifeError):
    """A store file could not be encoded, written or decoded.

    The in-memory state of the repository that raised it is still the
    post-mutation state; only the on-disk copy is stale.
    """

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to persist {path.name}: {reason}")
        self.path = path
        self.reason = reason


class SessionStateError(FastLifeError, ValueError):
    """Start while a fast is active, or stop while none is."""


class FileAccessError(FastLifeError):
    """The import source could not be opened, read or decoded."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to read {path}: {reason}")
        self.path = path


class InvalidFormatError(FastLifeError):
    """The import source was readable but had no recognized section."""
