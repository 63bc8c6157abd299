"""
Tests for the transaction validator and editor
"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal

from lifeledger.config import LedgerSettings
from lifeledger.models import TransactionDraft, TransactionType, default_categories
from lifeledger.validation import (
    CATEGORY_KIND_MISMATCH,
    CATEGORY_REQUIRED,
    INVALID_AMOUNT,
    TAG_REQUIRED,
    TransactionEditor,
    TransactionRejectedError,
    TransactionValidator,
    normalize_timestamp,
    parse_amount,
)


def valid_draft(**overrides):
    data = dict(
        amount_text="12.50",
        kind=TransactionType.EXPENSE,
        category_id="exp_1",
        tag_id="pay_1",
        note="lunch",
        occurred_on=date(2024, 3, 15),
    )
    data.update(overrides)
    return TransactionDraft(**data)


@pytest.fixture
def editor(settings):
    return TransactionEditor(settings=settings)


class TestParseAmount:
    """Amount parsing."""

    @pytest.mark.parametrize("text,expected", [
        ("12.50", Decimal("12.50")),
        (" 3 ", Decimal("3")),
        ("0.01", Decimal("0.01")),
        (7, Decimal("7")),
        ("12.500", Decimal("12.500")),
        ("9999999999999.99", Decimal("9999999999999.99")),
    ])
    def test_valid_amounts(self, text, expected):
        assert parse_amount(text) == expected

    @pytest.mark.parametrize("text", [
        "", "abc", "0", "-5", "NaN", "Infinity", "12abc", None,
        "1e400", "1e13", "12345678901234567.89", "0.001",
    ])
    def test_invalid_amounts(self, text):
        assert parse_amount(text) is None


class TestFormValidation:
    """Stage 1 checks."""

    def test_valid_draft(self, settings):
        result = TransactionValidator(settings).validate(valid_draft())
        assert result.is_valid is True
        assert result.issues == []

    @pytest.mark.parametrize("amount", ["", "0", "-1", "abc"])
    def test_bad_amount(self, settings, amount):
        result = TransactionValidator(settings).validate(valid_draft(amount_text=amount))
        assert result.is_valid is False
        assert result.first_error.message == INVALID_AMOUNT

    def test_missing_category(self, settings):
        result = TransactionValidator(settings).validate(valid_draft(category_id=None))
        assert result.first_error.message == CATEGORY_REQUIRED

    def test_missing_tag(self, settings):
        result = TransactionValidator(settings).validate(valid_draft(tag_id=""))
        assert result.first_error.message == TAG_REQUIRED

    def test_all_problems_reported(self, settings):
        """Test every failed check is listed, amount first."""
        draft = valid_draft(amount_text="", category_id=None, tag_id=None)
        result = TransactionValidator(settings).validate(draft)
        assert [i.message for i in result.issues] == [
            INVALID_AMOUNT, CATEGORY_REQUIRED, TAG_REQUIRED,
        ]

    def test_long_note_is_warning(self, settings):
        result = TransactionValidator(settings).validate(valid_draft(note="x" * 51))
        assert result.is_valid is True
        assert len(result.warnings) == 1
        assert result.issues[0].issue_type == "truncated"


class TestConsistencyValidation:
    """Stage 2 checks."""

    def test_kind_mismatch_rejected(self, settings):
        """Test an income category cannot be used on an expense."""
        result = TransactionValidator(settings).validate(
            valid_draft(category_id="inc_1"), default_categories()
        )
        assert result.is_valid is False
        assert result.first_error.message == CATEGORY_KIND_MISMATCH

    def test_deleted_category_allowed(self, settings):
        """Test a category id that no longer exists passes."""
        result = TransactionValidator(settings).validate(
            valid_draft(category_id="custom_deleted"), default_categories()
        )
        assert result.is_valid is True

    def test_skipped_after_form_errors(self, settings):
        result = TransactionValidator(settings).validate(
            valid_draft(amount_text="", category_id="inc_1"), default_categories()
        )
        assert [i.message for i in result.issues] == [INVALID_AMOUNT]

    def test_lenient_mode(self, tmp_path):
        settings = LedgerSettings(data_dir=tmp_path, strict_category_kind=False)
        result = TransactionValidator(settings).validate(
            valid_draft(category_id="inc_1"), default_categories()
        )
        assert result.is_valid is True


class TestTransactionEditor:
    """Draft to Transaction."""

    def test_commit_new(self, editor):
        tx = editor.commit(valid_draft(), categories=default_categories())
        assert tx.id
        assert tx.amount == Decimal("12.50")
        assert tx.kind == TransactionType.EXPENSE
        assert tx.note == "lunch"
        assert tx.occurred_at.tzinfo is not None

    def test_commit_keeps_existing_id(self, editor):
        tx = editor.commit(valid_draft(amount_text="99"), existing_id="abc")
        assert tx.id == "abc"
        assert tx.amount == Decimal("99")

    def test_commit_truncates_note(self, editor):
        tx = editor.commit(valid_draft(note="y" * 80))
        assert tx.note == "y" * 50

    def test_commit_rejects_with_message(self, editor):
        with pytest.raises(TransactionRejectedError, match=INVALID_AMOUNT) as exc:
            editor.commit(valid_draft(amount_text="0"))
        assert exc.value.result.has_errors

    def test_date_is_local_midnight(self, editor):
        """Test a picked date keeps its calendar day in local time."""
        tx = editor.commit(valid_draft(occurred_on=date(2024, 3, 15)))
        local = tx.occurred_at.astimezone()
        assert local.date() == date(2024, 3, 15)
        assert (local.hour, local.minute) == (0, 0)

    def test_full_timestamp_kept(self, editor):
        moment = datetime(2024, 3, 15, 12, 30, tzinfo=timezone.utc)
        tx = editor.commit(valid_draft(occurred_on=moment))
        assert tx.occurred_at == moment


class TestNormalizeTimestamp:

    def test_aware_is_converted_to_utc(self):
        moment = datetime(2024, 3, 15, 8, 0, tzinfo=timezone.utc)
        assert normalize_timestamp(moment) == moment
        assert normalize_timestamp(moment).tzinfo == timezone.utc

    def test_date_becomes_aware(self):
        assert normalize_timestamp(date(2024, 1, 1)).tzinfo == timezone.utc


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
