"""
Storage Services Package

Provides the abstract key-value interface, the local backends and the typed
LedgerStore built on top of them.
"""

from lifeledger.services.storage.interface import (
    KeyValueBackend,
    SnapshotImportError,
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from lifeledger.services.storage.local_files import (
    InMemoryBackend,
    JsonFileBackend,
)
from lifeledger.services.storage.ledger_store import LedgerStore

__all__ = [
    # Interface
    "KeyValueBackend",
    # Exceptions
    "SnapshotImportError",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    # Implementations
    "InMemoryBackend",
    "JsonFileBackend",
    "LedgerStore",
]
