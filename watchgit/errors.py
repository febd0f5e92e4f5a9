"""Error taxonomy for the repository registry.

Every error carries an ``exit_code`` so the command-line shell can map each
kind to a distinct process status without inspecting messages.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class WatchgitError(RuntimeError):
    """Base class for all registry and shell errors."""

    exit_code = 9


class StoreUnavailable(WatchgitError):
    """Raised when the backing database file cannot be opened or created."""

    exit_code = 3


class CreateFailed(WatchgitError):
    """Raised when writing the schema of a brand new store fails.

    The partially created file has already been removed when this is raised.
    """

    exit_code = 4


class SchemaMismatch(WatchgitError):
    """Raised when the stamped schema version is not the one we understand."""

    exit_code = 5

    def __init__(self, path: Path | str, found: int, expected: int) -> None:
        super().__init__(
            f"Corrupt database or old schema (found version {found}, expected {expected}). "
            f"DB: {path}"
        )
        self.path = str(path)
        self.found = found
        self.expected = expected


class VersionUnreadable(WatchgitError):
    """Raised when the schema version stamp is absent or malformed."""

    exit_code = 6


class PathResolutionError(WatchgitError):
    """Raised when a repository path cannot be canonicalized."""

    exit_code = 7

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot resolve path {path!r}: {reason}")
        self.path = path


class ConstraintViolation(WatchgitError):
    """Raised when an insert breaks alias or path uniqueness."""

    exit_code = 8

    def __init__(self, message: str, column: Optional[str] = None) -> None:
        super().__init__(message)
        self.column = column


class StoreError(WatchgitError):
    """Any other failure reported by the embedded database engine."""

    exit_code = 9


class HandlerFailed(StoreError):
    """Raised when a row handler signals failure during iteration."""

    exit_code = 10


class AliasNotFound(WatchgitError):
    exit_code = 1

    def __init__(self, alias: str) -> None:
        super().__init__(f"No repository tracked under alias {alias!r}")
        self.alias = alias


class GitError(WatchgitError):
    """Raised when ``git`` cannot be run or reports an error."""

    exit_code = 11

    def __init__(self, message: str, returncode: Optional[int] = None) -> None:
        super().__init__(message)
        self.returncode = returncode
