"""
Transaction Validation

A TransactionDraft (raw form input) only becomes a Transaction through
TransactionEditor.commit. Validation happens in two stages:

STAGE 1 - FORM VALIDATION:
- Amount parses to a finite number greater than zero
- A category is selected
- A tag (payment method) is selected
- Over-long notes are flagged (and truncated on commit)

STAGE 2 - CONSISTENCY VALIDATION:
- The selected category applies to the draft's kind
  (income categories only on income, expense categories only on expense)

Stage 2 is skipped if stage 1 fails. A category id that no longer resolves
passes stage 2, so transactions whose category was deleted stay editable.

IMPORTANT: Validation never persists anything. Rejected drafts are reported
back to the caller with every issue found.
"""

from datetime import date, datetime, time, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence, Union
from uuid import uuid4

from lifeledger.config import LedgerSettings, get_settings
from lifeledger.models.ledger import (
    Category,
    Transaction,
    TransactionDraft,
    ValidationIssue,
    ValidationResult,
)


INVALID_AMOUNT = "invalid amount"
CATEGORY_REQUIRED = "category required"
TAG_REQUIRED = "tag required"
CATEGORY_KIND_MISMATCH = "category kind mismatch"

# Amounts are written to JSON as floats; these bounds keep every accepted
# amount exactly representable (at most 15 significant digits).
AMOUNT_MAX_DECIMALS = 2
AMOUNT_LIMIT = Decimal("1e13")


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class TransactionRejectedError(LedgerError):
    """A draft failed validation; nothing was saved."""

    def __init__(self, result: ValidationResult):
        self.result = result
        first = result.first_error
        super().__init__(first.message if first else "transaction rejected")


class TransactionNotFoundError(LedgerError):
    """No transaction with the given id exists."""
    pass


def parse_amount(text: Union[str, int, float, Decimal, None]) -> Optional[Decimal]:
    """
    Parse user input into a positive, finite Decimal.

    Returns None for anything else (empty, not a number, NaN, infinite,
    zero or negative), and for amounts of AMOUNT_LIMIT or more or with more
    than AMOUNT_MAX_DECIMALS decimal places.
    """
    if text is None:
        return None
    try:
        amount = Decimal(str(text).strip())
    except InvalidOperation:
        return None
    if not amount.is_finite() or amount <= 0 or amount >= AMOUNT_LIMIT:
        return None
    if amount.normalize().as_tuple().exponent < -AMOUNT_MAX_DECIMALS:
        return None
    return amount


def normalize_timestamp(value: Union[date, datetime]) -> datetime:
    """
    Turn a form date into a canonical UTC timestamp.

    A plain date means the start of that day in local time. Naive datetimes
    are taken as local time. The result is always timezone-aware UTC.
    """
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    return value.astimezone(timezone.utc)


class TransactionValidator:
    """
    Validates a TransactionDraft through the two-stage pipeline.
    """

    def __init__(self, settings: Optional[LedgerSettings] = None):
        self._settings = settings or get_settings()

    def _validate_form(
        self,
        draft: TransactionDraft,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: Form validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if parse_amount(draft.amount_text) is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message=INVALID_AMOUNT,
                severity="error",
            ))

        if not draft.category_id:
            issues.append(ValidationIssue(
                field="category_id",
                issue_type="missing",
                message=CATEGORY_REQUIRED,
                severity="error",
            ))

        if not draft.tag_id:
            issues.append(ValidationIssue(
                field="tag_id",
                issue_type="missing",
                message=TAG_REQUIRED,
                severity="error",
            ))

        limit = self._settings.note_max_length
        if len(draft.note) > limit:
            issues.append(ValidationIssue(
                field="note",
                issue_type="truncated",
                message=f"Note is longer than {limit} characters and will be shortened",
                severity="warning",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def _validate_consistency(
        self,
        draft: TransactionDraft,
        categories: Sequence[Category],
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: Category/kind consistency.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if self._settings.strict_category_kind:
            category = next((c for c in categories if c.id == draft.category_id), None)
            if category is not None and category.kind != draft.kind:
                issues.append(ValidationIssue(
                    field="category_id",
                    issue_type="inconsistent",
                    message=CATEGORY_KIND_MISMATCH,
                    severity="error",
                ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def validate(
        self,
        draft: TransactionDraft,
        categories: Optional[Sequence[Category]] = None,
    ) -> ValidationResult:
        """
        Run the full validation pipeline.

        Args:
            draft: The form input to validate
            categories: Known categories; the consistency stage is skipped
                        when not given

        Returns:
            ValidationResult with all issues found
        """
        all_issues = []

        form_valid, form_issues = self._validate_form(draft)
        all_issues.extend(form_issues)

        consistent = True
        if form_valid and categories is not None:
            consistent, consistency_issues = self._validate_consistency(draft, categories)
            all_issues.extend(consistency_issues)

        return ValidationResult(
            is_valid=form_valid and consistent,
            issues=all_issues,
            warnings=[i.message for i in all_issues if i.severity == "warning"],
        )


class TransactionEditor:
    """
    Turns validated drafts into Transaction records.

    On create a fresh id is minted; on edit the existing id is kept and the
    whole record is replaced.
    """

    def __init__(
        self,
        validator: Optional[TransactionValidator] = None,
        settings: Optional[LedgerSettings] = None,
    ):
        self._settings = settings or get_settings()
        self._validator = validator or TransactionValidator(self._settings)

    def validate(
        self,
        draft: TransactionDraft,
        categories: Optional[Sequence[Category]] = None,
    ) -> ValidationResult:
        return self._validator.validate(draft, categories)

    def commit(
        self,
        draft: TransactionDraft,
        existing_id: Optional[str] = None,
        categories: Optional[Sequence[Category]] = None,
    ) -> Transaction:
        """
        Validate a draft and build the Transaction it describes.

        Raises:
            TransactionRejectedError: If validation fails
        """
        result = self._validator.validate(draft, categories)
        if not result.is_valid:
            raise TransactionRejectedError(result)

        return Transaction(
            id=existing_id or str(uuid4()),
            amount=parse_amount(draft.amount_text),
            kind=draft.kind,
            category_id=draft.category_id,
            tag_id=draft.tag_id,
            note=draft.note[:self._settings.note_max_length],
            occurred_at=normalize_timestamp(draft.occurred_on),
        )
