from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from watchgit.errors import AliasNotFound, GitError
from watchgit.infrastructure.git_client import GitStatus
from watchgit.repositories.entries import EntriesRepo, RepoEntry

logger = logging.getLogger(__name__)


class _GitProto(Protocol):
    def status(self, path: str) -> GitStatus: ...


@dataclass(frozen=True)
class RepoStatus:
    alias: str
    path: str
    status: Optional[GitStatus] = None
    error: Optional[str] = None

    @property
    def is_clean(self) -> bool:
        return self.error is None and self.status is not None and self.status.is_clean


class StatusService:
    """Collect git status for tracked repositories.

    - Reads entries through the registry's row iterator.
    - A git failure for one repository is recorded on its row and does not
      abort the listing.
    """

    def __init__(self, repo: EntriesRepo, client: Optional[_GitProto] = None) -> None:
        self._repo = repo
        self._client: _GitProto
        if client is None:
            from watchgit.infrastructure.git_client import GitClient as _Client

            self._client = _Client()
        else:
            self._client = client

    def entries(self, alias: Optional[str] = None) -> list[RepoEntry]:
        if alias is None:
            return self._repo.list_all()

        paths: list[str] = []

        def _collect(_column: str, value: str) -> None:
            paths.append(value)

        self._repo.for_alias(_collect, alias)
        if not paths:
            raise AliasNotFound(alias)
        return [RepoEntry(alias=alias, path=p) for p in paths]

    def statuses(self, alias: Optional[str] = None) -> list[RepoStatus]:
        result: list[RepoStatus] = []
        for entry in self.entries(alias):
            try:
                status = self._client.status(entry.path)
            except GitError as exc:
                logger.warning(
                    "git status failed", extra={"alias": entry.alias, "error": str(exc)}
                )
                result.append(RepoStatus(alias=entry.alias, path=entry.path, error=str(exc)))
                continue
            result.append(RepoStatus(alias=entry.alias, path=entry.path, status=status))
        return result
