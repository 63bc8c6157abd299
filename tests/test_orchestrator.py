"""
Integration tests for LedgerService

Each flow runs on in-memory storage: mutate the working set, then check both
the in-memory state and what a fresh load from the same backend returns.
"""

import json
import pytest
from datetime import date, datetime
from decimal import Decimal

from lifeledger.models import (
    ActivityEventType,
    BudgetConfig,
    Period,
    TransactionDraft,
    TransactionType,
)
from lifeledger.orchestrator import LedgerService, create_app_components
from lifeledger.services.storage import InMemoryBackend, LedgerStore, StorageWriteError
from lifeledger.validation import TransactionNotFoundError, TransactionRejectedError


NOW = datetime(2024, 3, 15, 18, 0)


def draft(amount="10", kind=TransactionType.EXPENSE, category_id="exp_1", **extra):
    return TransactionDraft(
        amount_text=amount,
        kind=kind,
        category_id=category_id,
        tag_id=extra.pop("tag_id", "pay_1"),
        occurred_on=extra.pop("occurred_on", datetime(2024, 3, 15, 12, 0)),
        **extra,
    )


def reload(service, backend, settings):
    fresh = LedgerService(LedgerStore(backend, settings=settings), settings=settings)
    fresh.load()
    return fresh


class FailingBackend(InMemoryBackend):
    """Accepts reads, refuses every write."""

    def set_item(self, key, value):
        raise StorageWriteError(f"Failed to write {key}: disk full")


class BudgetRefusingBackend(InMemoryBackend):
    """Refuses writes to the budget key only."""

    def set_item(self, key, value):
        if "_budget_" in key:
            raise StorageWriteError(f"Failed to write {key}: disk full")
        super().set_item(key, value)


class TestStartup:

    def test_fresh_service_has_defaults(self, service):
        assert service.transactions == []
        assert len(service.categories) == 14
        assert [t.name for t in service.tags][0] == "Cash"
        assert service.budget == BudgetConfig()

    def test_load_is_logged(self, service):
        assert service.activity.recent_events[0].event_type == ActivityEventType.DATA_LOADED

    def test_factory_in_memory(self, settings):
        svc = create_app_components(use_storage=False, settings=settings)
        assert svc.transactions == []

    def test_factory_with_files(self, settings):
        svc = create_app_components(use_storage=True, settings=settings)
        svc.add_transaction(draft())
        again = create_app_components(use_storage=True, settings=settings)
        assert len(again.transactions) == 1

    def test_new_draft_preselects(self, service):
        d = service.new_draft(TransactionType.INCOME)
        assert d.category_id == "inc_1"
        assert d.tag_id == "pay_1"


class TestTransactionFlow:

    def test_add_prepends_and_persists(self, service, backend, settings):
        first = service.add_transaction(draft("5"))
        second = service.add_transaction(draft("7"))
        assert [t.id for t in service.transactions] == [second.id, first.id]
        assert [t.id for t in reload(service, backend, settings).transactions] == [
            second.id, first.id,
        ]

    def test_rejected_draft_saves_nothing(self, service, backend):
        with pytest.raises(TransactionRejectedError):
            service.add_transaction(draft("0"))
        assert service.transactions == []
        assert backend.keys() == []
        assert service.activity.recent_events[0].event_type == ActivityEventType.TRANSACTION_REJECTED

    def test_overflowing_amount_keeps_stored_ledger(self, service, backend, settings):
        kept = service.add_transaction(draft("12"))
        with pytest.raises(TransactionRejectedError):
            service.add_transaction(draft("1e400"))
        assert [t.id for t in reload(service, backend, settings).transactions] == [kept.id]

    def test_kind_mismatch_rejected(self, service):
        with pytest.raises(TransactionRejectedError, match="category kind mismatch"):
            service.add_transaction(draft(category_id="inc_1"))

    def test_update_replaces_in_place(self, service, backend, settings):
        a = service.add_transaction(draft("5"))
        b = service.add_transaction(draft("7"))
        updated = service.update_transaction(a.id, draft("50", note="fixed"))

        assert updated.id == a.id
        assert [t.id for t in service.transactions] == [b.id, a.id]
        stored = reload(service, backend, settings).get_transaction(a.id)
        assert stored.amount == Decimal("50")
        assert stored.note == "fixed"

    def test_update_unknown_id(self, service):
        with pytest.raises(TransactionNotFoundError):
            service.update_transaction("nope", draft())

    def test_delete(self, service, backend, settings):
        tx = service.add_transaction(draft())
        assert service.delete_transaction(tx.id) is True
        assert service.delete_transaction(tx.id) is False
        assert reload(service, backend, settings).transactions == []

    def test_aggregates_use_working_set(self, service):
        service.add_transaction(draft("40"))
        service.add_transaction(draft("100", TransactionType.INCOME, "inc_1"))
        service.update_budget(BudgetConfig(daily=Decimal("44")))

        stats = service.aggregates(Period.DAY, now=NOW)
        assert stats.net == Decimal("60")
        assert stats.budget.remaining == Decimal("4")
        assert stats.budget.is_warning is True


class TestSettingsFlow:

    def test_deleted_category_keeps_transactions(self, service):
        """Test orphaned transactions stay visible under the unknown label."""
        category = service.add_category("Coffee")
        tx = service.add_transaction(draft("4.20", category_id=category.id))

        assert service.delete_category(category.id) is True
        assert service.get_transaction(tx.id) is not None
        assert service.category_label(tx.category_id) == "unknown"

        stats = service.aggregates(Period.DAY, now=NOW)
        assert stats.expense == Decimal("4.20")
        assert [s.label for s in stats.category_breakdown] == ["unknown"]

    def test_orphaned_transaction_still_editable(self, service):
        category = service.add_category("Coffee")
        tx = service.add_transaction(draft(category_id=category.id))
        service.delete_category(category.id)
        service.update_transaction(tx.id, draft("11", category_id=category.id))
        assert service.get_transaction(tx.id).amount == Decimal("11")

    def test_blank_label_ignored(self, service):
        assert service.add_category("   ") is None
        assert service.add_tag("") is None
        assert len(service.categories) == 14

    def test_tags_persist_under_accounts(self, service, backend, settings):
        tag = service.add_tag("Voucher")
        assert tag.id.startswith("tag_")
        raw = json.loads(backend.get_item(settings.storage_key("accounts")))
        assert raw[-1]["name"] == "Voucher"

        assert service.delete_tag(tag.id) is True
        assert service.tag_label(tag.id) == "unknown"
        assert tag.id not in [t.id for t in reload(service, backend, settings).tags]

    def test_income_category(self, service):
        category = service.add_category("Tips", TransactionType.INCOME)
        assert category in service.categories_of(TransactionType.INCOME)


class TestBackupFlow:

    def test_import_reloads_working_set(self, service):
        service.add_transaction(draft())
        assert service.import_snapshot('{"budget": {"daily": 50}}') is True
        assert service.budget.daily == Decimal("50")
        assert len(service.transactions) == 1

    def test_bad_import_keeps_state(self, service):
        tx = service.add_transaction(draft())
        assert service.import_snapshot(b"\x00garbage") is False
        assert [t.id for t in service.transactions] == [tx.id]

    def test_failed_import_write_keeps_state(self, settings, activity_logger):
        store = LedgerStore(BudgetRefusingBackend(), settings=settings, activity_logger=activity_logger)
        svc = LedgerService(store, activity_logger=activity_logger, settings=settings)
        svc.load()
        tx = svc.add_transaction(draft())

        assert svc.import_snapshot('{"transactions": [], "budget": {"daily": 5}}') is False
        assert [t.id for t in svc.transactions] == [tx.id]
        assert [t.id for t in store.get_transactions()] == [tx.id]
        assert svc.budget.daily == Decimal("0")

    def test_clear_all(self, service):
        service.add_transaction(draft())
        service.add_category("Coffee")
        service.clear_all()
        assert service.transactions == []
        assert len(service.categories) == 14

    def test_export_filename(self, service):
        assert service.export_filename(date(2024, 3, 15)) == "lifeledger_backup_2024-03-15.json"


class TestSaveFailure:

    @pytest.fixture
    def failing_service(self, settings, activity_logger):
        store = LedgerStore(FailingBackend(), settings=settings, activity_logger=activity_logger)
        svc = LedgerService(store, activity_logger=activity_logger, settings=settings)
        svc.load()
        return svc

    def test_add_failure_propagates(self, failing_service):
        with pytest.raises(StorageWriteError):
            failing_service.add_transaction(draft())
        assert failing_service.activity.recent_events[0].event_type == ActivityEventType.SAVE_FAILED

    def test_working_set_keeps_mutation(self, failing_service):
        with pytest.raises(StorageWriteError):
            failing_service.update_budget(BudgetConfig(daily=Decimal("10")))
        assert failing_service.budget.daily == Decimal("10")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
