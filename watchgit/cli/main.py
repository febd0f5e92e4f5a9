from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from watchgit.application.services.status_service import RepoStatus, StatusService
from watchgit.config.settings import Settings, expand_location, load_settings
from watchgit.db.store import Store, open_store
from watchgit.errors import WatchgitError
from watchgit.infrastructure.git_client import GitClient
from watchgit.logging_config import get_logger

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_CONFIG = 12


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="watchgit", description="Keep an eye on your git repositories"
    )
    p.add_argument(
        "--db",
        metavar="LOCATION",
        help="Registry database (default: $WATCHGIT_DB or ~/.watchgit.db)",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    pa = sub.add_parser("add", help="Track a repository under an alias")
    pa.add_argument("alias", help="Short name for the repository")
    pa.add_argument("path", help="Path to the repository")

    pr = sub.add_parser("rm", help="Stop tracking an alias")
    pr.add_argument("alias")

    sub.add_parser("list", help="List tracked repositories")

    pp = sub.add_parser("path", help="Print the path tracked under an alias")
    pp.add_argument("alias")

    ps = sub.add_parser("status", help="Show git status of tracked repositories")
    ps.add_argument("alias", nargs="?", help="Only this repository")
    ps.add_argument("--dirty", action="store_true", help="Hide clean repositories")
    return p


def _cmd_add(store: Store, args: argparse.Namespace) -> int:
    path = store.entries.insert(args.alias, args.path)
    print(f"{args.alias} -> {path}")
    return EXIT_OK


def _cmd_rm(store: Store, args: argparse.Namespace) -> int:
    store.entries.remove(args.alias)
    return EXIT_OK


def _cmd_list(store: Store, args: argparse.Namespace) -> int:
    current: dict[str, str] = {}

    def _print_row(column: str, value: str) -> None:
        current[column] = value
        if column == "path":
            print(f"{current.get('alias', '')}\t{value}")
            current.clear()

    store.entries.for_each(_print_row)
    return EXIT_OK


def _cmd_path(store: Store, args: argparse.Namespace) -> int:
    found: list[str] = []

    def _print_path(_column: str, value: str) -> None:
        found.append(value)
        print(value)

    store.entries.for_alias(_print_path, args.alias)
    if not found:
        print(f"watchgit: no repository tracked under {args.alias!r}", file=sys.stderr)
        return EXIT_NOT_FOUND
    return EXIT_OK


def _format_status(row: RepoStatus) -> str:
    if row.error is not None:
        return f"{row.alias}\terror: {row.error}"
    if row.status is None:
        return f"{row.alias}\tunknown"
    return f"{row.alias}\t{row.status.summary()}"


def _cmd_status(store: Store, args: argparse.Namespace, settings: Settings) -> int:
    svc = StatusService(store.entries, GitClient(binary=settings.git_binary))
    rows = svc.statuses(args.alias)
    for row in rows:
        if args.dirty and row.is_clean:
            continue
        print(_format_status(row))
    return EXIT_OK


def main(argv: Sequence[str] | None = None, settings: Optional[Settings] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if settings is None:
        try:
            settings = load_settings()
        except RuntimeError as exc:
            print(f"watchgit: {exc}", file=sys.stderr)
            return EXIT_CONFIG

    logger = get_logger(log_file=settings.log_path, console_level=settings.log_level)

    try:
        db_path = expand_location(args.db) if args.db else settings.db_path
        with open_store(db_path, timeout=settings.busy_timeout) as store:
            if args.cmd == "add":
                return _cmd_add(store, args)
            if args.cmd == "rm":
                return _cmd_rm(store, args)
            if args.cmd == "list":
                return _cmd_list(store, args)
            if args.cmd == "path":
                return _cmd_path(store, args)
            return _cmd_status(store, args, settings)
    except WatchgitError as exc:
        logger.info("Command failed", extra={"cmd": args.cmd, "error": type(exc).__name__})
        print(f"watchgit: {exc}", file=sys.stderr)
        return exc.exit_code


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
