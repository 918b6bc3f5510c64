"""
State stores: memory or SQL, same StateStore contract.
Components receive a store instance; nothing reaches for a module-level singleton.
"""
from ridealert.store.base import StateStore
from ridealert.store.memory import MemoryStateStore
from ridealert.store.sql import SqlStateStore

__all__ = ["MemoryStateStore", "SqlStateStore", "StateStore"]
