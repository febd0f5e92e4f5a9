"""Application settings for watchgit.

Values come from environment variables, optionally loaded from a ``.env``
file with ``python-dotenv``, and are exposed through an immutable Pydantic
settings object.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

from watchgit.errors import StoreUnavailable

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
DEFAULT_DB_LOCATION = "~/.watchgit.db"
DEFAULT_LOG_FILE = "~/.watchgit.log"
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_GIT_BINARY = "git"
BUSY_TIMEOUT = 5.0  # seconds

_UNEXPANDED_VAR = re.compile(r"\$(\w+|\{[^}]*\})")


class Settings(BaseModel):
    """Immutable settings object used across the application."""

    db_location: str = DEFAULT_DB_LOCATION
    log_file: str = DEFAULT_LOG_FILE
    log_level: str = DEFAULT_LOG_LEVEL
    git_binary: str = DEFAULT_GIT_BINARY
    busy_timeout: float = BUSY_TIMEOUT

    model_config = ConfigDict(frozen=True)

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level

    @field_validator("busy_timeout")
    @classmethod
    def _non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("busy timeout must not be negative")
        return value

    @property
    def db_path(self) -> Path:
        return expand_location(self.db_location)

    @property
    def log_path(self) -> Path:
        return Path(os.path.expandvars(os.path.expanduser(self.log_file)))


def expand_location(location: str) -> Path:
    """Expand ``~`` and environment variables in a configured store location."""

    expanded = os.path.expandvars(os.path.expanduser(location.strip()))
    if not expanded:
        raise StoreUnavailable("Store location is empty")
    leftover = _UNEXPANDED_VAR.search(expanded)
    if leftover:
        raise StoreUnavailable(
            f"Store location {location!r} references unset variable {leftover.group(0)}"
        )
    return Path(expanded)


def load_settings() -> Settings:
    """Construct the ``Settings`` instance based on environment variables."""

    load_dotenv()

    values: dict[str, object] = {}
    for field, env in (
        ("db_location", "WATCHGIT_DB"),
        ("log_file", "WATCHGIT_LOG_FILE"),
        ("log_level", "WATCHGIT_LOG_LEVEL"),
        ("git_binary", "WATCHGIT_GIT"),
    ):
        value = os.getenv(env)
        if value:
            values[field] = value

    raw_timeout = os.getenv("WATCHGIT_BUSY_TIMEOUT")
    if raw_timeout:
        try:
            values["busy_timeout"] = float(raw_timeout)
        except ValueError as exc:
            raise RuntimeError(f"WATCHGIT_BUSY_TIMEOUT must be a number, got {raw_timeout!r}") from exc

    try:
        return Settings(**values)  # type: ignore[arg-type]
    except ValueError as exc:
        raise RuntimeError(f"Invalid watchgit configuration: {exc}") from exc
