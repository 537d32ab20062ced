"""Storage layer for persisted focus state."""

from focustube.storage.database import Database, init_database
from focustube.storage.state_store import MemoryStateStore, SQLiteStateStore, StateStore

__all__ = ["Database", "init_database", "MemoryStateStore", "SQLiteStateStore", "StateStore"]
