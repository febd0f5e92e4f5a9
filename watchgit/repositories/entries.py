from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Union

# Called once per column of every row with (column_name, column_value).
# None, 0 and True mean success; anything else makes the iteration fail.
RowHandler = Callable[[str, str], Union[int, bool, None]]


@dataclass(frozen=True)
class RepoEntry:
    alias: str
    path: str


class EntriesRepo(ABC):
    """Repository interface for tracked repository entries."""

    @abstractmethod
    def insert(self, alias: str, raw_path: str) -> str:
        """Track ``raw_path`` under ``alias`` and return the stored canonical path."""

    @abstractmethod
    def remove(self, alias: str) -> None:
        """Stop tracking ``alias``. Unknown aliases are not an error."""

    @abstractmethod
    def iter_all(self) -> Iterator[tuple[str, str]]:
        """Yield (column, value) pairs of every entry ordered by alias."""

    @abstractmethod
    def iter_alias(self, alias: str) -> Iterator[tuple[str, str]]:
        """Yield (column, value) pairs for the path stored under ``alias``."""

    @abstractmethod
    def for_each(self, handler: RowHandler) -> None:
        """Invoke ``handler`` for every column of every entry."""

    @abstractmethod
    def for_alias(self, handler: RowHandler, alias: str) -> None:
        """Invoke ``handler`` for the path column of the entry named ``alias``."""

    def list_all(self) -> list[RepoEntry]:
        entries: list[RepoEntry] = []
        row: dict[str, str] = {}
        for column, value in self.iter_all():
            row[column] = value
            if len(row) == 2:
                entries.append(RepoEntry(alias=row["alias"], path=row["path"]))
                row = {}
        return entries

    def get_path(self, alias: str) -> Optional[str]:
        for _column, value in self.iter_alias(alias):
            return value
        return None
