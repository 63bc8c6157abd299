"""
Local Storage Backends

JSON files on disk are the default backend because:
1. The ledger is personal and lives on one machine
2. No database setup required
3. The files can be inspected and copied by hand

TRADEOFFS:
- No transactions across keys (each key is written on its own)
- Whole-file rewrites (fine for personal data volumes)

Each key is one file. Writes go to a temporary file in the same directory
that then replaces the target, so a reader never sees a half-written file.
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Optional

from tenacity import (
    RetryError,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from lifeledger.config import get_settings
from lifeledger.services.storage.interface import (
    KeyValueBackend,
    StorageReadError,
    StorageWriteError,
)


_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonFileBackend(KeyValueBackend):
    """
    File-per-key storage under a data directory.

    ``<directory>/<key>.json`` holds the value of ``key``.
    """

    def __init__(
        self,
        directory: Optional[Path] = None,
        retry_attempts: Optional[int] = None,
    ):
        settings = get_settings()
        self._directory = Path(directory or settings.data_dir)
        self._retry_attempts = retry_attempts or settings.write_retry_attempts

    @property
    def directory(self) -> Path:
        return self._directory

    def _path_for(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._directory / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        """Read a key's file, or None if it does not exist."""
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageReadError(f"Failed to read {path}: {e}")

    def _write(self, path: Path, value: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.stem}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def set_item(self, key: str, value: str) -> None:
        """Replace a key's file, retrying transient OS errors."""
        path = self._path_for(key)
        writer = retry(
            retry=retry_if_exception_type(OSError),
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
            reraise=True,
        )(self._write)
        try:
            writer(path, value)
        except (OSError, RetryError) as e:
            raise StorageWriteError(f"Failed to write {path}: {e}")

    def remove_item(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageWriteError(f"Failed to remove {path}: {e}")


class InMemoryBackend(KeyValueBackend):
    """
    Dict-backed storage.

    Used by the test suite and as the fallback when the data directory is
    not writable.
    """

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._items)
