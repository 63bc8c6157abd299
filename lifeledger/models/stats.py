"""
Statistics Models

Inputs and outputs of the aggregation engine. The engine itself lives in
lifeledger.stats; these are plain result containers.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from lifeledger.models.ledger import Money, Period, Transaction, TransactionType


class PeriodWindow(BaseModel):
    """Inclusive time window of a reporting period."""

    period: Period
    start: datetime
    end: datetime

    @model_validator(mode='after')
    def validate_order(self) -> 'PeriodWindow':
        if self.end < self.start:
            raise ValueError("Window end cannot be before start")
        return self

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


class AdHocFilter(BaseModel):
    """
    User filters from the filter panel.

    ``None`` (or the literal "all" / an empty string on input) means the
    constraint is off. When any constraint is on, the display list is taken
    from the whole history instead of the current period.
    """

    kind: Optional[TransactionType] = None
    tag_id: Optional[str] = None
    date_start: Optional[date] = None
    date_end: Optional[date] = None

    @field_validator('kind', 'tag_id', 'date_start', 'date_end', mode='before')
    @classmethod
    def all_means_none(cls, v):
        if v == "all" or v == "":
            return None
        return v

    @property
    def is_active(self) -> bool:
        return (
            self.kind is not None
            or self.tag_id is not None
            or self.date_start is not None
            or self.date_end is not None
        )

    def matches(self, transaction: Transaction) -> bool:
        """Check one transaction against every active constraint."""
        key = transaction.date_key
        if self.date_start and key < self.date_start.isoformat():
            return False
        if self.date_end and key > self.date_end.isoformat():
            return False
        if self.kind is not None and transaction.kind != self.kind:
            return False
        if self.tag_id is not None and transaction.tag_id != self.tag_id:
            return False
        return True


class BudgetStatus(BaseModel):
    """Budget position for the active period."""

    threshold: Money = Field(default=Decimal("0"))
    remaining: Optional[Money] = Field(
        default=None,
        description="threshold - expense, or None when no budget is set"
    )
    is_over_budget: bool = False
    is_warning: bool = False

    @property
    def has_budget(self) -> bool:
        return self.remaining is not None


class CategorySlice(BaseModel):
    """Expense total of one category label."""

    label: str
    total: Money
    share: Optional[float] = Field(
        default=None,
        description="Percentage of total expense, filled in by top_categories"
    )


class TrendPoint(BaseModel):
    """Net amount of one calendar day."""

    day: date
    label: str
    value: Money


class Aggregates(BaseModel):
    """Everything the dashboard and the statistics view display."""

    period: Period
    window: PeriodWindow
    income: Money
    expense: Money
    net: Money
    budget: BudgetStatus
    filters_active: bool = False
    display_list: list[Transaction] = Field(default_factory=list)
    category_breakdown: list[CategorySlice] = Field(default_factory=list)
    trend: list[TrendPoint] = Field(default_factory=list)

    @property
    def display_amount(self) -> Decimal:
        """Remaining budget when a budget is set, otherwise the net amount."""
        if self.budget.remaining is not None:
            return self.budget.remaining
        return self.net
