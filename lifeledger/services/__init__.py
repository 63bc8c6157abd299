"""Services package."""

from lifeledger.services.storage import (
    InMemoryBackend,
    JsonFileBackend,
    KeyValueBackend,
    LedgerStore,
    SnapshotImportError,
    StorageError,
    StorageReadError,
    StorageWriteError,
)

__all__ = [
    "InMemoryBackend",
    "JsonFileBackend",
    "KeyValueBackend",
    "LedgerStore",
    "SnapshotImportError",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
]
