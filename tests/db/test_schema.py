from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any

import pytest

from watchgit.db import schema
from watchgit.db.schema import SCHEMA_VERSION, check_version, create_and_stamp, parse_version
from watchgit.db.store import open_store
from watchgit.errors import CreateFailed, StoreError, VersionUnreadable


@pytest.mark.parametrize("raw, expected", [(1, 1), ("1", 1), ("42", 42), ("-3", -3), (0, 0)])
def test_parse_version_accepts_whole_integers(raw: Any, expected: int) -> None:
    assert parse_version(raw) == expected


@pytest.mark.parametrize("raw", ["", "1a", " 1", "1 ", "+", "-", "1.0", None, True, 1.0])
def test_parse_version_rejects_everything_else(raw: Any) -> None:
    with pytest.raises(VersionUnreadable):
        parse_version(raw)


def test_create_and_stamp_writes_table_and_version(tmp_path: Path) -> None:
    path = tmp_path / "new.db"
    conn = create_and_stamp(path)
    try:
        assert check_version(conn) == SCHEMA_VERSION
        cols = [r[1] for r in conn.execute("PRAGMA table_info(entries)").fetchall()]
        assert cols == ["id", "alias", "path"]
    finally:
        conn.close()
    assert path.is_file()


def test_create_failure_removes_partial_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(schema, "SCHEMA_SQL", "CREATE TABLE entries (")
    path = tmp_path / "broken.db"
    with pytest.raises(CreateFailed):
        create_and_stamp(path)
    assert not path.exists()
    assert not Path(f"{path}-journal").exists()


def test_create_over_existing_store_leaves_it_intact(
    tmp_path: Path, repo_dirs: dict[str, Path]
) -> None:
    path = tmp_path / "registry.db"
    with open_store(path) as store:
        store.entries.insert("alpha", str(repo_dirs["alpha"]))
    before = path.read_bytes()

    with pytest.raises(StoreError):
        create_and_stamp(path)

    assert path.read_bytes() == before
    with open_store(path) as store:
        assert store.entries.get_path("alpha") == str(repo_dirs["alpha"].resolve())


def test_create_over_foreign_file_leaves_it_intact(tmp_path: Path) -> None:
    path = tmp_path / "notes.txt"
    path.write_text("keep me")
    with pytest.raises(StoreError):
        create_and_stamp(path)
    assert path.read_text() == "keep me"


def test_create_in_missing_directory_fails(tmp_path: Path) -> None:
    path = tmp_path / "missing" / "new.db"
    with pytest.raises(CreateFailed):
        create_and_stamp(path)
    assert not path.exists()


def test_check_version_of_plain_sqlite_file_is_zero(tmp_path: Path) -> None:
    conn = sqlite3.connect(tmp_path / "plain.db")
    try:
        assert check_version(conn) == 0
    finally:
        conn.close()


def test_check_version_on_garbage_file(tmp_path: Path) -> None:
    path = tmp_path / "garbage.db"
    path.write_bytes(b"this is definitely not a database file" * 100)
    conn = sqlite3.connect(path)
    try:
        with pytest.raises(VersionUnreadable):
            check_version(conn)
    finally:
        conn.close()


class _StubCursor:
    def __init__(self, description: Any, rows: list[tuple[Any, ...]]) -> None:
        self.description = description
        self._rows = rows

    def fetchall(self) -> list[tuple[Any, ...]]:
        return self._rows


class _StubConn:
    def __init__(self, cursor: _StubCursor) -> None:
        self._cursor = cursor

    def execute(self, *_: Any) -> _StubCursor:
        return self._cursor


@pytest.mark.parametrize(
    "description, rows",
    [
        ((("schema_version", None),), [(1,)]),
        ((("user_version", None),), []),
        ((("user_version", None),), [(1,), (1,)]),
        ((("user_version", None), ("other", None)), [(1, 2)]),
        ((("user_version", None),), [("1x",)]),
        (None, []),
    ],
)
def test_check_version_rejects_unexpected_results(
    description: Any, rows: list[tuple[Any, ...]]
) -> None:
    conn = _StubConn(_StubCursor(description, rows))
    with pytest.raises(VersionUnreadable):
        check_version(conn)  # type: ignore[arg-type]


def test_check_version_accepts_textual_stamp() -> None:
    conn = _StubConn(_StubCursor((("user_version", None),), [("1",)]))
    assert check_version(conn) == 1  # type: ignore[arg-type]
