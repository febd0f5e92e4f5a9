"""Schema creation and version checking for the registry store.

The schema version lives in SQLite's ``user_version`` header slot. It is
written once, together with the table, when the store file is created and
read back on every later open.
"""

from __future__ import annotations

import logging
import os
import re
import sqlite3
from pathlib import Path
from typing import Any

from watchgit.errors import CreateFailed, StoreError, VersionUnreadable

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
VERSION_PRAGMA = "user_version"

SCHEMA_SQL = """
CREATE TABLE entries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    alias TEXT NOT NULL UNIQUE,
    path TEXT NOT NULL UNIQUE
)
"""

_VERSION_RE = re.compile(r"-?[0-9]+")


def parse_version(raw: Any) -> int:
    """Parse a stamped version value, rejecting anything but a whole integer."""

    if isinstance(raw, bool):
        raise VersionUnreadable(f"Schema version is not an integer: {raw!r}")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and _VERSION_RE.fullmatch(raw):
        return int(raw)
    raise VersionUnreadable(f"Schema version is not an integer: {raw!r}")


def check_version(conn: sqlite3.Connection) -> int:
    """Return the version stamped into ``conn``'s database."""

    try:
        cur = conn.execute(f"PRAGMA {VERSION_PRAGMA}")
        rows = cur.fetchall()
    except sqlite3.Error as exc:
        raise VersionUnreadable(f"Cannot read schema version: {exc}") from exc

    columns = [d[0] for d in cur.description or ()]
    if columns != [VERSION_PRAGMA] or len(rows) != 1 or len(rows[0]) != 1:
        raise VersionUnreadable(
            f"Unexpected schema version result: columns={columns} rows={len(rows)}"
        )
    return parse_version(rows[0][0])


def create_and_stamp(path: Path, *, timeout: float = 5.0) -> sqlite3.Connection:
    """Create a new store at ``path`` with the schema and version stamp.

    The file is created exclusively; if something already exists at ``path``
    :class:`StoreError` is raised and the file is left alone. Table creation and
    the stamp share one transaction. On any later failure the connection is
    closed and the file this call created is deleted before
    :class:`CreateFailed` is raised.
    """

    try:
        fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
    except FileExistsError as exc:
        raise StoreError(
            f"Store was created concurrently by another process. DB: {path}"
        ) from exc
    except OSError as exc:
        raise CreateFailed(f"Failed to create a new database at {path}: {exc}") from exc
    os.close(fd)

    try:
        conn = sqlite3.connect(sqlite_uri(path, "rw"), uri=True, timeout=timeout)
    except sqlite3.Error as exc:
        _discard(path)
        raise CreateFailed(f"Failed to create a new database at {path}: {exc}") from exc

    try:
        conn.execute("BEGIN")
        conn.execute(SCHEMA_SQL)
        conn.execute(f"PRAGMA {VERSION_PRAGMA} = {int(SCHEMA_VERSION)}")
        conn.commit()
    except sqlite3.Error as exc:
        conn.close()
        _discard(path)
        raise CreateFailed(f"Failed to write schema to {path}: {exc}") from exc

    logger.info("Created registry store", extra={"db": str(path), "version": SCHEMA_VERSION})
    return conn


def _discard(path: Path) -> None:
    for candidate in (path, Path(f"{path}-journal")):
        try:
            candidate.unlink()
        except FileNotFoundError:
            continue
        except OSError as exc:
            logger.warning(
                "Could not remove partial store file",
                extra={"db": str(candidate), "error": str(exc)},
            )


def sqlite_uri(path: Path, mode: str) -> str:
    """Build a ``file:`` URI for ``path`` opened with the given SQLite ``mode``."""
    escaped = str(path).replace("%", "%25").replace("?", "%3f").replace("#", "%23")
    return f"file:{escaped}?mode={mode}"
