"""Store handle: lifecycle of the connection to the registry database."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from types import TracebackType
from typing import Optional, Type

from watchgit.db.schema import SCHEMA_VERSION, check_version, create_and_stamp, sqlite_uri
from watchgit.errors import SchemaMismatch, StoreError, StoreUnavailable, VersionUnreadable
from watchgit.repositories.sqlite.entries_sqlite import EntriesRepoSqlite

logger = logging.getLogger(__name__)


class Store:
    """An open registry database.

    Not safe for concurrent use: a handle belongs to the thread that opened it.
    """

    def __init__(self, conn: sqlite3.Connection, path: Path) -> None:
        self._conn: Optional[sqlite3.Connection] = conn
        self.path = path
        self._entries: Optional[EntriesRepoSqlite] = None

    @property
    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreError(f"Store is closed. DB: {self.path}")
        return self._conn

    @property
    def closed(self) -> bool:
        return self._conn is None

    @property
    def entries(self) -> EntriesRepoSqlite:
        """Registry operations bound to this handle."""
        conn = self.connection
        if self._entries is None:
            self._entries = EntriesRepoSqlite(conn)
        return self._entries

    @property
    def schema_version(self) -> int:
        return check_version(self.connection)

    def close(self) -> None:
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None
        self._entries = None
        logger.debug("Closed registry store", extra={"db": str(self.path)})

    def __enter__(self) -> "Store":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()


def open_store(path: Path | str, *, timeout: float = 5.0) -> Store:
    """Open the store at ``path``, creating it first if no file exists there.

    ``path`` must already be expanded; shell-style expansion of the configured
    location happens in :mod:`watchgit.config.settings`.
    """

    db_path = Path(path)
    if not db_path.exists() and not db_path.is_symlink():
        if not db_path.parent.is_dir():
            raise StoreUnavailable(f"Directory for the store does not exist. DB: {db_path}")
        conn = create_and_stamp(db_path, timeout=timeout)
        return Store(conn, db_path)

    if not db_path.is_file():
        raise StoreUnavailable(f"Store location is not a regular file. DB: {db_path}")

    try:
        conn = sqlite3.connect(sqlite_uri(db_path, "rw"), uri=True, timeout=timeout)
    except sqlite3.Error as exc:
        raise StoreUnavailable(f"Cannot open store: {exc}. DB: {db_path}") from exc

    try:
        version = check_version(conn)
    except VersionUnreadable:
        conn.close()
        logger.warning("Unreadable schema version", extra={"db": str(db_path)})
        raise

    if version != SCHEMA_VERSION:
        conn.close()
        logger.warning(
            "Refusing store with foreign schema version",
            extra={"db": str(db_path), "found": version, "expected": SCHEMA_VERSION},
        )
        raise SchemaMismatch(db_path, version, SCHEMA_VERSION)

    logger.debug("Opened registry store", extra={"db": str(db_path), "version": version})
    return Store(conn, db_path)
