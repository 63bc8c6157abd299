"""
Main Orchestrator for LifeLedger

This module ties the components together. LedgerService holds the working
set in memory, applies every user mutation to it, writes the affected
collection back in full, and hands the aggregation engine its inputs.

Flows:
1. Startup (store -> working set)
2. Transaction edit (draft -> validate -> replace in list -> save list)
3. Settings edit (budget, categories, tags -> save collection)
4. Backup (export, import -> reload, clear-all -> defaults)

DESIGN DECISION: Save failures are logged and re-raised. The in-memory
working set keeps the mutation, so the UI can warn the user and retry.
"""

from datetime import date, datetime
from typing import Callable, Optional, Union

from lifeledger.activity import ActivityLogger
from lifeledger.config import LedgerSettings, get_settings
from lifeledger.models.ledger import (
    BudgetConfig,
    Category,
    Period,
    Tag,
    Transaction,
    TransactionDraft,
    TransactionType,
    default_budget,
    default_categories,
    default_tags,
    new_category,
    new_tag,
)
from lifeledger.models.stats import AdHocFilter, Aggregates
from lifeledger.services.storage import (
    InMemoryBackend,
    JsonFileBackend,
    KeyValueBackend,
    LedgerStore,
    StorageWriteError,
)
from lifeledger.stats import compute_aggregates
from lifeledger.validation import (
    TransactionEditor,
    TransactionNotFoundError,
    TransactionRejectedError,
)


class LedgerService:
    """
    In-memory working set of the ledger plus every mutation on it.

    The store is read once, in load(). After that the lists held here are
    the source of truth and the store holds a serialized mirror.
    """

    def __init__(
        self,
        store: LedgerStore,
        activity_logger: Optional[ActivityLogger] = None,
        editor: Optional[TransactionEditor] = None,
        settings: Optional[LedgerSettings] = None,
    ):
        self._store = store
        self._settings = settings or get_settings()
        self._activity = activity_logger or ActivityLogger()
        self._editor = editor or TransactionEditor(settings=self._settings)

        self.transactions: list[Transaction] = []
        self.categories: list[Category] = default_categories()
        self.tags: list[Tag] = default_tags()
        self.budget: BudgetConfig = default_budget()

    @property
    def store(self) -> LedgerStore:
        return self._store

    @property
    def activity(self) -> ActivityLogger:
        return self._activity

    def load(self) -> None:
        """Read all collections from the store into memory."""
        snapshot = self._store.load_snapshot()
        self.transactions = snapshot.transactions
        self.budget = snapshot.budget
        self.categories = snapshot.categories
        self.tags = snapshot.tags
        self._activity.log_data_loaded(len(self.transactions))

    def _persist(self, collection: str, save: Callable[[], None]) -> None:
        try:
            save()
        except StorageWriteError as e:
            self._activity.log_save_failed(collection, str(e))
            raise

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return next((t for t in self.transactions if t.id == transaction_id), None)

    def category_for(self, category_id: str) -> Optional[Category]:
        return next((c for c in self.categories if c.id == category_id), None)

    def tag_for(self, tag_id: str) -> Optional[Tag]:
        return next((t for t in self.tags if t.id == tag_id), None)

    def category_label(self, category_id: str) -> str:
        category = self.category_for(category_id)
        return category.name if category else self._settings.unknown_label

    def tag_label(self, tag_id: str) -> str:
        tag = self.tag_for(tag_id)
        return tag.name if tag else self._settings.unknown_label

    def categories_of(self, kind: TransactionType) -> list[Category]:
        return [c for c in self.categories if c.kind == kind]

    def new_draft(self, kind: TransactionType = TransactionType.EXPENSE) -> TransactionDraft:
        """A blank draft with the first matching category and first tag selected."""
        draft = TransactionDraft(tag_id=self.tags[0].id if self.tags else None)
        return draft.switch_kind(kind, self.categories)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def _commit(self, draft: TransactionDraft, existing_id: Optional[str] = None) -> Transaction:
        try:
            return self._editor.commit(draft, existing_id=existing_id, categories=self.categories)
        except TransactionRejectedError as e:
            self._activity.log_transaction_rejected(
                [issue.model_dump() for issue in e.result.issues]
            )
            raise

    def add_transaction(self, draft: TransactionDraft) -> Transaction:
        """
        Validate a draft and add it as a new transaction.

        Raises:
            TransactionRejectedError: If the draft is invalid (nothing saved)
            StorageWriteError: If the save fails
        """
        transaction = self._commit(draft)
        self.transactions = [transaction] + self.transactions
        self._persist("transactions", lambda: self._store.save_transactions(self.transactions))
        self._activity.log_transaction_added(
            transaction.id, transaction.kind.value, str(transaction.amount)
        )
        return transaction

    def update_transaction(self, transaction_id: str, draft: TransactionDraft) -> Transaction:
        """
        Replace an existing transaction, keeping its id.

        Raises:
            TransactionNotFoundError: If no transaction has this id
            TransactionRejectedError: If the draft is invalid (nothing saved)
            StorageWriteError: If the save fails
        """
        if self.get_transaction(transaction_id) is None:
            raise TransactionNotFoundError(f"Transaction not found: {transaction_id}")

        transaction = self._commit(draft, existing_id=transaction_id)
        self.transactions = [
            transaction if t.id == transaction_id else t for t in self.transactions
        ]
        self._persist("transactions", lambda: self._store.save_transactions(self.transactions))
        self._activity.log_transaction_updated(transaction.id, str(transaction.amount))
        return transaction

    def delete_transaction(self, transaction_id: str) -> bool:
        """Remove a transaction by id. Returns False if it did not exist."""
        remaining = [t for t in self.transactions if t.id != transaction_id]
        if len(remaining) == len(self.transactions):
            return False
        self.transactions = remaining
        self._persist("transactions", lambda: self._store.save_transactions(self.transactions))
        self._activity.log_transaction_deleted(transaction_id)
        return True

    # ------------------------------------------------------------------
    # Settings collections
    # ------------------------------------------------------------------

    def update_budget(self, budget: BudgetConfig) -> BudgetConfig:
        self.budget = budget
        self._persist("budget", lambda: self._store.save_budget(self.budget))
        self._activity.log_budget_updated(
            str(budget.daily), str(budget.weekly), str(budget.monthly)
        )
        return budget

    def add_category(
        self,
        name: str,
        kind: TransactionType = TransactionType.EXPENSE,
    ) -> Optional[Category]:
        """Add a user category. Blank names are ignored."""
        if not name or not name.strip():
            return None
        category = new_category(name.strip(), kind)
        self.categories = self.categories + [category]
        self._persist("categories", lambda: self._store.save_categories(self.categories))
        self._activity.log_label_added("category", category.id, category.name)
        return category

    def delete_category(self, category_id: str) -> bool:
        """
        Remove a category. Transactions that use it are kept and show the
        unknown label from then on.
        """
        remaining = [c for c in self.categories if c.id != category_id]
        if len(remaining) == len(self.categories):
            return False
        self.categories = remaining
        self._persist("categories", lambda: self._store.save_categories(self.categories))
        self._activity.log_label_deleted("category", category_id)
        return True

    def add_tag(self, name: str) -> Optional[Tag]:
        """Add a payment-method tag. Blank names are ignored."""
        if not name or not name.strip():
            return None
        tag = new_tag(name.strip())
        self.tags = self.tags + [tag]
        self._persist("accounts", lambda: self._store.save_tags(self.tags))
        self._activity.log_label_added("tag", tag.id, tag.name)
        return tag

    def delete_tag(self, tag_id: str) -> bool:
        remaining = [t for t in self.tags if t.id != tag_id]
        if len(remaining) == len(self.tags):
            return False
        self.tags = remaining
        self._persist("accounts", lambda: self._store.save_tags(self.tags))
        self._activity.log_label_deleted("tag", tag_id)
        return True

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def aggregates(
        self,
        period: Union[Period, str] = Period.DAY,
        filters: Optional[AdHocFilter] = None,
        now: Optional[datetime] = None,
    ) -> Aggregates:
        """Recompute the dashboard over the current working set."""
        return compute_aggregates(
            self.transactions,
            period,
            now=now,
            categories=self.categories,
            budget=self.budget,
            filters=filters,
            settings=self._settings,
        )

    # ------------------------------------------------------------------
    # Backup
    # ------------------------------------------------------------------

    def export_snapshot(self) -> str:
        return self._store.export_snapshot()

    def export_filename(self, today: Optional[date] = None) -> str:
        return self._store.export_filename(today)

    def import_snapshot(self, blob: Union[str, bytes]) -> bool:
        """Apply a backup and reload the working set if it was accepted."""
        if not self._store.import_snapshot(blob):
            return False
        self.load()
        return True

    def clear_all(self) -> None:
        """Delete all stored data and fall back to the defaults."""
        self._store.clear_all()
        self.load()


def create_app_components(
    use_storage: bool = True,
    settings: Optional[LedgerSettings] = None,
) -> LedgerService:
    """
    Factory function to create a loaded LedgerService.

    Args:
        use_storage: Whether to persist to the data directory.
                    Set to False for an in-memory session.
        settings: Settings to use (defaults to get_settings())

    Returns:
        A LedgerService with its working set loaded
    """
    settings = settings or get_settings()
    activity_logger = ActivityLogger()

    backend: KeyValueBackend
    if use_storage:
        backend = JsonFileBackend(settings.data_dir, settings.write_retry_attempts)
    else:
        backend = InMemoryBackend()

    store = LedgerStore(backend, settings=settings, activity_logger=activity_logger)
    service = LedgerService(store, activity_logger=activity_logger, settings=settings)
    service.load()
    return service
