"""
Data Models Package

This package contains all Pydantic models used in LifeLedger.
Everything that is stored, exported or computed conforms to these schemas.
"""

from lifeledger.models.ledger import (
    CHART_COLORS,
    chart_color,
    DEFAULT_CATEGORIES,
    DEFAULT_TAGS,
    BudgetConfig,
    Category,
    Money,
    Period,
    StoreSnapshot,
    Tag,
    Transaction,
    TransactionDraft,
    TransactionType,
    ValidationIssue,
    ValidationResult,
    default_budget,
    default_categories,
    default_tags,
    new_category,
    new_tag,
)
from lifeledger.models.stats import (
    AdHocFilter,
    Aggregates,
    BudgetStatus,
    CategorySlice,
    PeriodWindow,
    TrendPoint,
)
from lifeledger.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
)
from lifeledger.models.icons import resolve_icon

__all__ = [
    # Ledger models
    "CHART_COLORS",
    "chart_color",
    "DEFAULT_CATEGORIES",
    "DEFAULT_TAGS",
    "BudgetConfig",
    "Category",
    "Money",
    "Period",
    "StoreSnapshot",
    "Tag",
    "Transaction",
    "TransactionDraft",
    "TransactionType",
    "ValidationIssue",
    "ValidationResult",
    "default_budget",
    "default_categories",
    "default_tags",
    "new_category",
    "new_tag",
    # Statistics models
    "AdHocFilter",
    "Aggregates",
    "BudgetStatus",
    "CategorySlice",
    "PeriodWindow",
    "TrendPoint",
    # Activity models
    "ActivityEvent",
    "ActivityEventBuilder",
    "ActivityEventType",
    "ActivitySeverity",
    # Icons
    "resolve_icon",
]
