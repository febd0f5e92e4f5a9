"""Backing store for the registry: connection lifecycle and schema."""

from watchgit.db.schema import SCHEMA_VERSION
from watchgit.db.store import Store, open_store

__all__ = ["SCHEMA_VERSION", "Store", "open_store"]
