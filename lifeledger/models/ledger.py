"""
Core Data Models for LifeLedger

These models define the schemas for everything that is stored, exported and
imported. They are designed to:
1. Keep the JSON wire names of existing backups (camelCase aliases)
2. Accept either the wire name or the Python name on input
3. Serialize money as plain JSON numbers

The stored models are deliberately lenient about amounts. Positivity is the
transaction editor's job; a corrupt record that slipped into storage must
still load instead of taking the whole collection down with it.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional, Sequence, Union
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
)


Money = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]

TAG_TYPE = "tag"
DEFAULT_CATEGORY_ICON = "Tag"
DEFAULT_CATEGORY_COLOR = "#9E9E9E"


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a transaction."""
    EXPENSE = "expense"
    INCOME = "income"


class Period(str, Enum):
    """Reporting granularity of the dashboard."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


# =============================================================================
# LEDGER ENTITIES
# =============================================================================

class Category(BaseModel):
    """
    A spending or income category.

    Names are not unique. A category only applies to transactions of its own
    kind; deleting one leaves historical transactions pointing at a missing id.
    """
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., description="Display name")
    kind: TransactionType = Field(
        default=TransactionType.EXPENSE,
        alias="type",
        description="Which kind of transaction this category applies to"
    )
    icon: str = Field(
        default=DEFAULT_CATEGORY_ICON,
        description="Symbolic icon name, see lifeledger.models.icons"
    )
    color: str = Field(
        default=DEFAULT_CATEGORY_COLOR,
        description="Display colour as a hex string"
    )


class Tag(BaseModel):
    """
    A payment-method label (cash, bank card, ...).

    Stored under the name "account" for compatibility with older backups,
    but it carries no balance.
    """
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    id: str = Field(..., min_length=1)
    name: str
    type: str = Field(default=TAG_TYPE)


class Transaction(BaseModel):
    """A single income or expense record."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        min_length=1,
        description="Opaque unique id"
    )
    amount: Money = Field(
        ...,
        description="Transaction amount, positive for well-formed records"
    )
    kind: TransactionType = Field(..., alias="type")
    category_id: str = Field(..., alias="categoryId")
    tag_id: str = Field(..., alias="accountId")
    note: str = Field(default="")
    occurred_at: datetime = Field(..., alias="date")

    @field_validator('note', mode='before')
    @classmethod
    def none_note_is_empty(cls, v):
        return "" if v is None else v

    @property
    def date_key(self) -> str:
        """The ``YYYY-MM-DD`` prefix of the stored timestamp."""
        return self.occurred_at.isoformat()[:10]

    @property
    def signed_amount(self) -> Decimal:
        """Income as positive, expense as negative."""
        if self.kind == TransactionType.INCOME:
            return self.amount
        return -self.amount


class BudgetConfig(BaseModel):
    """
    Budget thresholds per period.

    A threshold of 0 means no budget is set for that period.
    """
    model_config = ConfigDict(populate_by_name=True)

    daily: Money = Field(default=Decimal("0"), ge=0)
    weekly: Money = Field(default=Decimal("0"), ge=0)
    monthly: Money = Field(default=Decimal("0"), ge=0)
    enable_alerts: bool = Field(default=True, alias="enableAlerts")

    def threshold_for(self, period: Period) -> Decimal:
        """Return the threshold that applies to a reporting period."""
        if period == Period.DAY:
            return self.daily
        if period == Period.WEEK:
            return self.weekly
        return self.monthly


class StoreSnapshot(BaseModel):
    """
    All persisted collections taken together (the export/import unit).

    Every key is optional on import; a missing key means "leave as is".
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    transactions: Optional[list[Transaction]] = None
    budget: Optional[BudgetConfig] = None
    categories: Optional[list[Category]] = None
    tags: Optional[list[Tag]] = Field(default=None, alias="accounts")


# =============================================================================
# SEED DATA
# =============================================================================

DEFAULT_CATEGORIES: tuple[Category, ...] = (
    # Expense
    Category(id="exp_1", name="Food & Dining", kind=TransactionType.EXPENSE, icon="Utensils", color="#FF8042"),
    Category(id="exp_2", name="Transport", kind=TransactionType.EXPENSE, icon="Bus", color="#00C49F"),
    Category(id="exp_3", name="Housing", kind=TransactionType.EXPENSE, icon="Home", color="#0088FE"),
    Category(id="exp_4", name="Shopping", kind=TransactionType.EXPENSE, icon="ShoppingBag", color="#FFBB28"),
    Category(id="exp_5", name="Entertainment", kind=TransactionType.EXPENSE, icon="Gamepad2", color="#8884d8"),
    Category(id="exp_6", name="Health", kind=TransactionType.EXPENSE, icon="HeartPulse", color="#ff7373"),
    Category(id="exp_7", name="Education", kind=TransactionType.EXPENSE, icon="BookOpen", color="#82ca9d"),
    Category(id="exp_8", name="Gifts & Social", kind=TransactionType.EXPENSE, icon="Gift", color="#ffc658"),
    Category(id="exp_9", name="Investment Outflow", kind=TransactionType.EXPENSE, icon="TrendingDown", color="#607D8B"),
    Category(id="exp_10", name="Other Expense", kind=TransactionType.EXPENSE, icon="MoreHorizontal", color="#9E9E9E"),
    # Income
    Category(id="inc_1", name="Salary", kind=TransactionType.INCOME, icon="Briefcase", color="#4CAF50"),
    Category(id="inc_2", name="Investment Income", kind=TransactionType.INCOME, icon="TrendingUp", color="#F44336"),
    Category(id="inc_3", name="Passive Income", kind=TransactionType.INCOME, icon="Percent", color="#2196F3"),
    Category(id="inc_4", name="Other Income", kind=TransactionType.INCOME, icon="Award", color="#FF9800"),
)

DEFAULT_TAGS: tuple[Tag, ...] = (
    Tag(id="pay_1", name="Cash"),
    Tag(id="pay_2", name="WeChat Pay"),
    Tag(id="pay_3", name="Alipay"),
    Tag(id="pay_4", name="Bank Card"),
)

CHART_COLORS: tuple[str, ...] = (
    "#FF8042", "#00C49F", "#FFBB28", "#0088FE", "#8884d8",
    "#82ca9d", "#ffc658", "#ff7373", "#4CAF50", "#2196F3",
)


def chart_color(index: int) -> str:
    """Colour of the index-th slice of a chart, cycling through CHART_COLORS."""
    return CHART_COLORS[index % len(CHART_COLORS)]


def default_categories() -> list[Category]:
    """Fresh copies of the seed categories."""
    return [c.model_copy() for c in DEFAULT_CATEGORIES]


def default_tags() -> list[Tag]:
    """Fresh copies of the seed tags."""
    return [t.model_copy() for t in DEFAULT_TAGS]


def default_budget() -> BudgetConfig:
    return BudgetConfig()


def new_category(name: str, kind: TransactionType = TransactionType.EXPENSE) -> Category:
    """Create a user-defined category with the default icon and colour."""
    return Category(id=f"custom_{uuid4().hex}", name=name, kind=kind)


def new_tag(name: str) -> Tag:
    """Create a user-defined payment-method tag."""
    return Tag(id=f"tag_{uuid4().hex}", name=name)


# =============================================================================
# EDITOR MODELS
# =============================================================================

class TransactionDraft(BaseModel):
    """
    Raw form input for a transaction.

    This is UNVERIFIED data. It becomes a Transaction only through
    TransactionEditor.commit, which validates and normalizes it.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    amount_text: str = Field(default="", description="Amount as typed")
    kind: TransactionType = TransactionType.EXPENSE
    category_id: Optional[str] = None
    tag_id: Optional[str] = None
    note: str = ""
    occurred_on: Union[datetime, date] = Field(
        default_factory=date.today,
        description="Date picked in the form, or a full timestamp"
    )

    @field_validator('category_id', 'tag_id', mode='before')
    @classmethod
    def blank_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('note', mode='before')
    @classmethod
    def none_note_is_empty(cls, v):
        return "" if v is None else v

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> 'TransactionDraft':
        """Populate a draft from an existing record for editing."""
        return cls(
            amount_text=str(transaction.amount),
            kind=transaction.kind,
            category_id=transaction.category_id,
            tag_id=transaction.tag_id,
            note=transaction.note,
            occurred_on=transaction.occurred_at,
        )

    def switch_kind(
        self,
        kind: TransactionType,
        categories: Sequence[Category],
    ) -> 'TransactionDraft':
        """
        Change the kind and reset the category selection.

        The category becomes the first category of the new kind, or None
        when no category of that kind exists.
        """
        self.kind = kind
        first = next((c for c in categories if c.kind == kind), None)
        self.category_id = first.id if first else None
        return self


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'truncated')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Result of validating a TransactionDraft."""

    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-blocking warnings"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def first_error(self) -> Optional[ValidationIssue]:
        return next((i for i in self.issues if i.severity == "error"), None)
