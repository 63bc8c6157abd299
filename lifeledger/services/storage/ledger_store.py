"""
Ledger Store

Serializes the four ledger collections into a KeyValueBackend.

GUARANTEES:
- Reads never raise. Missing or unreadable data is replaced by the
  documented default (empty list, seed categories, seed tags, zero budget).
- Saves always write the whole collection under its key. Nothing is merged.
- Imports are all-or-nothing: a malformed backup, or one whose writes
  fail part way, leaves storage as it was.

Write failures are NOT swallowed. They propagate as StorageWriteError so the
caller can tell the user the save failed. Imports report them as False.
"""

import json
from datetime import date
from typing import Callable, Optional, Sequence, TypeVar, Union

from pydantic import TypeAdapter, ValidationError

from lifeledger.activity import ActivityLogger
from lifeledger.config import LedgerSettings, get_settings
from lifeledger.models.ledger import (
    BudgetConfig,
    Category,
    StoreSnapshot,
    Tag,
    Transaction,
    default_budget,
    default_categories,
    default_tags,
)
from lifeledger.services.storage.interface import (
    KeyValueBackend,
    SnapshotImportError,
    StorageError,
    StorageReadError,
)


T = TypeVar("T")

TRANSACTIONS = "transactions"
BUDGET = "budget"
CATEGORIES = "categories"
ACCOUNTS = "accounts"

COLLECTIONS = (TRANSACTIONS, BUDGET, CATEGORIES, ACCOUNTS)

_transactions_adapter = TypeAdapter(list[Transaction])
_budget_adapter = TypeAdapter(BudgetConfig)
_categories_adapter = TypeAdapter(list[Category])
_tags_adapter = TypeAdapter(list[Tag])


class LedgerStore:
    """
    Typed access to the persisted ledger.

    Tags are stored under the "accounts" key, the name older backups use.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        settings: Optional[LedgerSettings] = None,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._backend = backend
        self._settings = settings or get_settings()
        self._activity = activity_logger or ActivityLogger()

    def key_for(self, collection: str) -> str:
        """Namespaced storage key of a collection."""
        return self._settings.storage_key(collection)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _read(
        self,
        collection: str,
        adapter: TypeAdapter,
        default_factory: Callable[[], T],
    ) -> T:
        key = self.key_for(collection)
        try:
            raw = self._backend.get_item(key)
        except StorageReadError as e:
            self._activity.log_stored_data_corrupt(key, str(e))
            return default_factory()

        if raw is None or not raw.strip():
            return default_factory()

        try:
            return adapter.validate_json(raw)
        except ValidationError as e:
            self._activity.log_stored_data_corrupt(key, str(e))
            return default_factory()

    def get_transactions(self) -> list[Transaction]:
        return self._read(TRANSACTIONS, _transactions_adapter, list)

    def get_budget(self) -> BudgetConfig:
        return self._read(BUDGET, _budget_adapter, default_budget)

    def get_categories(self) -> list[Category]:
        return self._read(CATEGORIES, _categories_adapter, default_categories)

    def get_tags(self) -> list[Tag]:
        return self._read(ACCOUNTS, _tags_adapter, default_tags)

    def load_snapshot(self) -> StoreSnapshot:
        """Read all four collections at once."""
        return StoreSnapshot(
            transactions=self.get_transactions(),
            budget=self.get_budget(),
            categories=self.get_categories(),
            tags=self.get_tags(),
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @staticmethod
    def _payload(adapter: TypeAdapter, data) -> str:
        return adapter.dump_json(data, by_alias=True).decode("utf-8")

    def _write(self, collection: str, adapter: TypeAdapter, data) -> None:
        self._backend.set_item(self.key_for(collection), self._payload(adapter, data))

    def save_transactions(self, data: Sequence[Transaction]) -> None:
        self._write(TRANSACTIONS, _transactions_adapter, list(data))

    def save_budget(self, config: BudgetConfig) -> None:
        self._write(BUDGET, _budget_adapter, config)

    def save_categories(self, data: Sequence[Category]) -> None:
        self._write(CATEGORIES, _categories_adapter, list(data))

    def save_tags(self, data: Sequence[Tag]) -> None:
        self._write(ACCOUNTS, _tags_adapter, list(data))

    def clear_all(self) -> None:
        """Remove every stored collection; defaults return on next read."""
        for collection in COLLECTIONS:
            self._backend.remove_item(self.key_for(collection))
        self._activity.log_data_cleared()

    # ------------------------------------------------------------------
    # Backup
    # ------------------------------------------------------------------

    def export_snapshot(self) -> str:
        """
        Serialize all current collections as one pretty-printed JSON object.

        Shape: {"transactions": [...], "budget": {...},
                "categories": [...], "accounts": [...]}
        """
        data = {
            "transactions": _transactions_adapter.dump_python(
                self.get_transactions(), mode="json", by_alias=True
            ),
            "budget": _budget_adapter.dump_python(
                self.get_budget(), mode="json", by_alias=True
            ),
            "categories": _categories_adapter.dump_python(
                self.get_categories(), mode="json", by_alias=True
            ),
            "accounts": _tags_adapter.dump_python(
                self.get_tags(), mode="json", by_alias=True
            ),
        }
        blob = json.dumps(data, indent=2, ensure_ascii=False)
        self._activity.log_snapshot_exported(len(blob.encode("utf-8")))
        return blob

    def export_filename(self, today: Optional[date] = None) -> str:
        """File name for a backup, e.g. ``lifeledger_backup_2024-03-15.json``."""
        today = today or date.today()
        return f"{self._settings.app_name}_backup_{today.isoformat()}.json"

    @staticmethod
    def parse_snapshot(blob: Union[str, bytes]) -> StoreSnapshot:
        """
        Parse and validate a backup without touching storage.

        Raises:
            SnapshotImportError: If the blob is not a valid backup object
        """
        try:
            data = json.loads(blob)
        except (ValueError, TypeError) as e:
            raise SnapshotImportError(f"Backup is not valid JSON: {e}")

        if not isinstance(data, dict):
            raise SnapshotImportError("Backup must be a JSON object")

        try:
            return StoreSnapshot.model_validate(data)
        except ValidationError as e:
            raise SnapshotImportError(f"Backup does not match the ledger schema: {e}")

    def import_snapshot(self, blob: Union[str, bytes]) -> bool:
        """
        Overwrite the collections present in a backup.

        Keys missing from the backup (or set to null) are left untouched.
        Every payload is serialized before the first write. If a write fails,
        the keys already written get their previous values back.

        Returns:
            True if the backup was applied, False if it was rejected or
            could not be written (in which case nothing was changed)
        """
        try:
            snapshot = self.parse_snapshot(blob)
        except SnapshotImportError as e:
            self._activity.log_snapshot_import_failed(str(e))
            return False

        sections = (
            (TRANSACTIONS, _transactions_adapter, snapshot.transactions),
            (BUDGET, _budget_adapter, snapshot.budget),
            (CATEGORIES, _categories_adapter, snapshot.categories),
            (ACCOUNTS, _tags_adapter, snapshot.tags),
        )
        payloads = {
            self.key_for(collection): self._payload(adapter, data)
            for collection, adapter, data in sections
            if data is not None
        }

        written: dict[str, Optional[str]] = {}
        try:
            for key, payload in payloads.items():
                previous = self._backend.get_item(key)
                self._backend.set_item(key, payload)
                written[key] = previous
        except StorageError as e:
            self._rollback(written)
            self._activity.log_snapshot_import_failed(str(e))
            return False

        self._activity.log_snapshot_imported(
            [collection for collection, _, data in sections if data is not None]
        )
        return True

    def _rollback(self, written: dict[str, Optional[str]]) -> None:
        """Restore keys overwritten by a failed import."""
        for key, previous in written.items():
            try:
                if previous is None:
                    self._backend.remove_item(key)
                else:
                    self._backend.set_item(key, previous)
            except StorageError as e:
                self._activity.log_save_failed(key, str(e))
