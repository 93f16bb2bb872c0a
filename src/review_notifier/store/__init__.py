"""Store implementations."""

from .base import PersistenceError, Store, StoredReview
from .sqlite_store import SQLiteStore

__all__ = ["PersistenceError", "Store", "StoredReview", "SQLiteStore"]
