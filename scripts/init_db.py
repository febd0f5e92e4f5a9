from __future__ import annotations

import argparse
import sys
from pathlib import Path


def main(argv: list[str] | None = None) -> int:
    # Ensure project root (containing 'watchgit') is importable
    project_root = Path(__file__).resolve().parents[1]
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))

    from watchgit.config.settings import expand_location
    from watchgit.db.store import open_store
    from watchgit.errors import WatchgitError

    parser = argparse.ArgumentParser(description="Create (or validate) the watchgit registry")
    parser.add_argument(
        "--db",
        default="~/.watchgit.db",
        help="Path to SQLite DB file (will be created if missing)",
    )
    args = parser.parse_args(argv)

    try:
        db_path = expand_location(args.db)
        with open_store(db_path) as store:
            version = store.schema_version
    except WatchgitError as exc:
        print(f"init_db: {exc}", file=sys.stderr)
        return exc.exit_code

    print(f"Registry ready at: {db_path} (schema version {version})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
