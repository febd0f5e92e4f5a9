from __future__ import annotations

import argparse
import os
import sqlite3
import sys
from pathlib import Path

# Ensure project root (containing 'watchgit') is importable
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from watchgit.db.schema import sqlite_uri  # noqa: E402


def _connect(db_path: str) -> sqlite3.Connection:
    # Read-only so inspecting a foreign or outdated file never changes it.
    conn = sqlite3.connect(sqlite_uri(Path(db_path), "ro"), uri=True)
    conn.row_factory = sqlite3.Row
    return conn


def stamped_version(conn: sqlite3.Connection) -> int:
    return int(conn.execute("PRAGMA user_version").fetchone()[0])


def list_tables(conn: sqlite3.Connection) -> list[str]:
    cur = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name")
    return [r["name"] for r in cur.fetchall()]


def list_entries(conn: sqlite3.Connection) -> list[sqlite3.Row]:
    return list(conn.execute("SELECT id, alias, path FROM entries ORDER BY alias").fetchall())


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Inspect the watchgit registry database")
    p.add_argument("--db", default=os.path.expanduser("~/.watchgit.db"))
    args = p.parse_args(argv)

    if not os.path.isfile(args.db):
        print(f"No database at {args.db}.")
        return 1

    conn = _connect(args.db)
    try:
        print(f"DB: {args.db}")
        print(f"Schema version: {stamped_version(conn)}")
        tables = list_tables(conn)
        print(f"Tables: {', '.join(tables) or '-'}")
        if "entries" not in tables:
            print("No entries table; not a watchgit registry.")
            return 1

        rows = list_entries(conn)
        if not rows:
            print("No repositories tracked yet.")
            return 0
        print("Entries:")
        for r in rows:
            print(f"  {r['id']:>4} {r['alias']:<20} {r['path']}")
        return 0
    except sqlite3.DatabaseError as exc:
        print(f"Cannot read {args.db}: {exc}")
        return 1
    finally:
        conn.close()


if __name__ == "__main__":
    raise SystemExit(main())
