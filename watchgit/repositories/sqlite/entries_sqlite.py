from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Any, Generator, Iterator, Optional, Sequence

from watchgit.errors import (
    ConstraintViolation,
    HandlerFailed,
    PathResolutionError,
    StoreError,
)

from ..entries import EntriesRepo, RowHandler

logger = logging.getLogger(__name__)

_SELECT_ALL = "SELECT alias, path FROM entries ORDER BY alias ASC"
_SELECT_ALIAS = "SELECT path FROM entries WHERE alias = ?"


def canonical_path(raw_path: str) -> str:
    """Return the absolute, symlink-free form of ``raw_path``.

    The path must exist.
    """

    if not raw_path:
        raise PathResolutionError(raw_path, "empty path")
    try:
        return str(Path(raw_path).resolve(strict=True))
    except (OSError, RuntimeError) as exc:
        raise PathResolutionError(raw_path, getattr(exc, "strerror", None) or str(exc)) from exc


def _violated_column(exc: sqlite3.IntegrityError) -> Optional[str]:
    # e.g. "UNIQUE constraint failed: entries.alias"
    message = str(exc)
    for column in ("alias", "path"):
        if message.endswith(f"entries.{column}"):
            return column
    return None


def _succeeded(result: Any) -> bool:
    if isinstance(result, bool):
        return result
    return result is None or result == 0


class EntriesRepoSqlite(EntriesRepo):
    """SQLite implementation of :class:`EntriesRepo`."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def insert(self, alias: str, raw_path: str) -> str:
        path = canonical_path(raw_path)
        try:
            self._conn.execute(
                "INSERT INTO entries (alias, path) VALUES (?, ?)",
                (alias, path),
            )
            self._conn.commit()
        except sqlite3.IntegrityError as exc:
            self._rollback_quietly()
            column = _violated_column(exc)
            raise ConstraintViolation(
                f"Cannot track {alias!r} -> {path}: {exc}", column=column
            ) from exc
        except sqlite3.Error as exc:
            self._rollback_quietly()
            raise StoreError(f"Insert of {alias!r} failed: {exc}") from exc
        logger.info("Tracked repository", extra={"alias": alias, "path": path})
        return path

    def remove(self, alias: str) -> None:
        try:
            cur = self._conn.execute("DELETE FROM entries WHERE alias = ?", (alias,))
            self._conn.commit()
        except sqlite3.Error as exc:
            self._rollback_quietly()
            raise StoreError(f"Removal of {alias!r} failed: {exc}") from exc
        logger.info("Removed repository", extra={"alias": alias, "rows": cur.rowcount})

    def iter_all(self) -> Iterator[tuple[str, str]]:
        for columns, row in self._rows(_SELECT_ALL, ()):
            yield from zip(columns, row)

    def iter_alias(self, alias: str) -> Iterator[tuple[str, str]]:
        for columns, row in self._rows(_SELECT_ALIAS, (alias,)):
            yield from zip(columns, row)

    def for_each(self, handler: RowHandler) -> None:
        self._visit(handler, _SELECT_ALL, ())

    def for_alias(self, handler: RowHandler, alias: str) -> None:
        self._visit(handler, _SELECT_ALIAS, (alias,))

    def _visit(self, handler: RowHandler, sql: str, params: Sequence[Any]) -> None:
        rows = self._rows(sql, params)
        try:
            for columns, row in rows:
                failed = False
                for column, value in zip(columns, row):
                    if not _succeeded(handler(column, value)):
                        failed = True
                if failed:
                    raise HandlerFailed(f"Row handler failed on {dict(zip(columns, row))}")
        finally:
            rows.close()

    def _rows(
        self, sql: str, params: Sequence[Any]
    ) -> Generator[tuple[list[str], tuple[str, ...]], None, None]:
        try:
            cur = self._conn.execute(sql, params)
        except sqlite3.Error as exc:
            raise StoreError(f"Query failed: {exc}") from exc
        try:
            columns = [d[0] for d in cur.description]
            while True:
                try:
                    row = cur.fetchone()
                except sqlite3.Error as exc:
                    raise StoreError(f"Query failed: {exc}") from exc
                if row is None:
                    return
                yield columns, row
        finally:
            cur.close()

    def _rollback_quietly(self) -> None:
        try:
            self._conn.rollback()
        except sqlite3.Error as exc:
            logger.warning("Rollback failed", extra={"error": str(exc)})
