"""
Abstract Storage Interface

We define an abstract key-value interface for persistence. This allows us to:
1. Keep data in JSON files on disk for normal use
2. Use in-memory storage for testing
3. Keep the ledger store decoupled from where bytes end up

The interface is intentionally tiny: get, set and remove a string value by
key. Serialization, defaults and the snapshot format live in LedgerStore.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueBackend(ABC):
    """
    Abstract interface for string key-value storage.

    Any storage implementation (JSON files, memory, ...) must implement
    these methods.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: The namespaced storage key

        Returns:
            The stored string, or None if nothing is stored

        Raises:
            StorageReadError: If the value exists but cannot be read
        """
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """
        Store a value, fully replacing any previous value.

        Args:
            key: The namespaced storage key
            value: Serialized content

        Raises:
            StorageWriteError: If the write fails
        """
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """
        Remove a key. Removing a missing key is not an error.

        Raises:
            StorageWriteError: If the removal fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageReadError(StorageError):
    """Stored data exists but could not be read."""
    pass


class StorageWriteError(StorageError):
    """Data could not be written (disk full, permissions, ...)."""
    pass


class SnapshotImportError(StorageError):
    """A backup could not be parsed or validated."""
    pass
