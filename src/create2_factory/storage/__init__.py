from .store import InMemoryNonceStore
from .sqlite_store import SQLiteNonceStore

__all__ = ["InMemoryNonceStore", "SQLiteNonceStore"]
