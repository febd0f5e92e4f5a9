from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path

import pytest

from watchgit.db.store import Store, open_store
from watchgit.logging_config import LOG_NAME


@pytest.fixture(autouse=True)
def reset_logger_handlers() -> Generator[None, None, None]:
    """Ensure tests run with a clean logger state."""
    logger = logging.getLogger(LOG_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    yield
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "registry.db"


@pytest.fixture
def store(db_path: Path) -> Generator[Store, None, None]:
    s = open_store(db_path)
    yield s
    s.close()


@pytest.fixture
def repo_dirs(tmp_path: Path) -> dict[str, Path]:
    dirs = {}
    for name in ("alpha", "beta", "gamma"):
        d = tmp_path / "repos" / name
        d.mkdir(parents=True)
        dirs[name] = d
    return dirs
