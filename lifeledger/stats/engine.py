"""
Statistics Engine

Computes everything the dashboard shows from the full transaction list.
Computation is DETERMINISTIC and pure: same inputs, same Aggregates. The
presentation layer calls compute_aggregates again whenever any input
changes; nothing is cached.

TIME ZONES:
Period windows are built in the time zone of the reference instant. A naive
reference means local wall-clock time. Transaction timestamps are moved into
that same frame before comparison; naive timestamps count as local time.

The engine does not second-guess stored amounts. A corrupt negative amount
will skew the totals; keeping records well-formed is the editor's job.
"""

import calendar
from datetime import date, datetime, timedelta, tzinfo
from decimal import Decimal
from typing import Iterable, Optional, Sequence, Union

from lifeledger.config import LedgerSettings, get_settings
from lifeledger.models.ledger import (
    BudgetConfig,
    Category,
    Period,
    Transaction,
    TransactionType,
)
from lifeledger.models.stats import (
    AdHocFilter,
    Aggregates,
    BudgetStatus,
    CategorySlice,
    PeriodWindow,
    TrendPoint,
)


ZERO = Decimal("0")


def _reference(now: Optional[datetime]) -> datetime:
    return now if now is not None else datetime.now()


def _align(moment: datetime, tz: Optional[tzinfo]) -> datetime:
    """Express a timestamp in the reference frame (naive local when tz is None)."""
    if tz is None:
        if moment.tzinfo is None:
            return moment
        return moment.astimezone().replace(tzinfo=None)
    return moment.astimezone(tz)


def period_window(period: Union[Period, str], reference: Optional[datetime] = None) -> PeriodWindow:
    """
    Compute the inclusive window of a reporting period.

    day:   reference day, 00:00:00.000 to 23:59:59.999
    week:  Monday of the reference week to the following Sunday
    month: first to last calendar day of the reference month
    """
    period = Period(period)
    reference = _reference(reference)

    start = reference.replace(hour=0, minute=0, second=0, microsecond=0)
    end = reference.replace(hour=23, minute=59, second=59, microsecond=999000)

    if period == Period.WEEK:
        start = start - timedelta(days=start.weekday())
        end = (start + timedelta(days=6)).replace(
            hour=23, minute=59, second=59, microsecond=999000
        )
    elif period == Period.MONTH:
        start = start.replace(day=1)
        last_day = calendar.monthrange(start.year, start.month)[1]
        end = start.replace(
            day=last_day, hour=23, minute=59, second=59, microsecond=999000
        )

    return PeriodWindow(period=period, start=start, end=end)


def filter_window(
    transactions: Iterable[Transaction],
    window: PeriodWindow,
) -> list[Transaction]:
    """Transactions whose timestamp falls inside the window."""
    tz = window.start.tzinfo
    return [t for t in transactions if window.contains(_align(t.occurred_at, tz))]


def totals(transactions: Iterable[Transaction]) -> tuple[Decimal, Decimal, Decimal]:
    """Return (income, expense, net) of a set of transactions."""
    income = ZERO
    expense = ZERO
    for t in transactions:
        if t.kind == TransactionType.INCOME:
            income += t.amount
        else:
            expense += t.amount
    return income, expense, income - expense


def budget_status(
    period: Union[Period, str],
    expense: Decimal,
    budget: Optional[BudgetConfig],
    warning_ratio: float = 0.9,
) -> BudgetStatus:
    """
    Budget position of a period.

    No threshold (0) means no remaining amount and no alert. Otherwise the
    warning fires once expense reaches warning_ratio of the threshold and
    stays on up to and including exactly spending the whole budget.
    """
    threshold = budget.threshold_for(Period(period)) if budget else ZERO
    if threshold <= 0:
        return BudgetStatus(threshold=threshold)

    remaining = threshold - expense
    is_over = remaining < 0
    is_warning = (not is_over) and (expense / threshold) >= Decimal(str(warning_ratio))

    return BudgetStatus(
        threshold=threshold,
        remaining=remaining,
        is_over_budget=is_over,
        is_warning=is_warning,
    )


def display_list(
    transactions: Sequence[Transaction],
    in_period: Sequence[Transaction],
    filters: Optional[AdHocFilter],
    tz: Optional[tzinfo] = None,
) -> list[Transaction]:
    """
    The list shown under the dashboard, newest first.

    Without active filters this is the period's transactions. With any
    active filter it is the WHOLE history narrowed by the filters; the period
    window is ignored entirely in that case.
    """
    if filters is not None and filters.is_active:
        selected = [t for t in transactions if filters.matches(t)]
    else:
        selected = list(in_period)
    return sorted(selected, key=lambda t: _align(t.occurred_at, tz), reverse=True)


def category_breakdown(
    in_period: Iterable[Transaction],
    categories: Sequence[Category],
    unknown_label: str = "unknown",
) -> list[CategorySlice]:
    """
    Expense totals per category name, in the order groups are first seen.

    Transactions whose category no longer exists are grouped under
    unknown_label, so the totals always add up to the period expense.
    """
    names = {c.id: c.name for c in categories}
    groups: dict[str, Decimal] = {}
    for t in in_period:
        if t.kind != TransactionType.EXPENSE:
            continue
        label = names.get(t.category_id, unknown_label)
        groups[label] = groups.get(label, ZERO) + t.amount
    return [CategorySlice(label=label, total=total) for label, total in groups.items()]


def top_categories(
    breakdown: Sequence[CategorySlice],
    limit: Optional[int] = None,
) -> list[CategorySlice]:
    """Sort a breakdown by total (largest first) and fill in percentages."""
    grand_total = sum((s.total for s in breakdown), ZERO)
    ranked = sorted(breakdown, key=lambda s: s.total, reverse=True)
    if limit is not None:
        ranked = ranked[:limit]

    result = []
    for s in ranked:
        share = float(s.total / grand_total * 100) if grand_total else 0.0
        result.append(CategorySlice(label=s.label, total=s.total, share=share))
    return result


def trend_series(
    transactions: Iterable[Transaction],
    now: Optional[datetime] = None,
    days: int = 7,
    zero_fill: bool = True,
) -> list[TrendPoint]:
    """
    Net amount per day over the trailing window ending today.

    Income counts positive, expense negative. Points are in calendar order.
    With zero_fill every day of the window is present (0 for quiet days);
    without it only days with at least one transaction appear.
    """
    reference = _reference(now)
    tz = reference.tzinfo
    last_day = reference.date()
    first_day = last_day - timedelta(days=days - 1)

    sums: dict[date, Decimal] = {}
    for t in transactions:
        day = _align(t.occurred_at, tz).date()
        if first_day <= day <= last_day:
            sums[day] = sums.get(day, ZERO) + t.signed_amount

    if zero_fill:
        days_out = [first_day + timedelta(days=i) for i in range(days)]
    else:
        days_out = sorted(sums)

    return [
        TrendPoint(day=d, label=f"{d.month}/{d.day}", value=sums.get(d, ZERO))
        for d in days_out
    ]


def compute_aggregates(
    transactions: Sequence[Transaction],
    period: Union[Period, str],
    now: Optional[datetime] = None,
    categories: Sequence[Category] = (),
    budget: Optional[BudgetConfig] = None,
    filters: Optional[AdHocFilter] = None,
    settings: Optional[LedgerSettings] = None,
    zero_fill_trend: bool = True,
) -> Aggregates:
    """
    Compute the full dashboard state.

    Args:
        transactions: The entire transaction history
        period: Active reporting period
        now: Reference instant (defaults to the current local time)
        categories: Category list, used for breakdown labels
        budget: Budget thresholds
        filters: Ad-hoc filters from the filter panel
        settings: Thresholds and labels (defaults to get_settings())
        zero_fill_trend: Emit a point for every day of the trend window

    Returns:
        Aggregates for the period
    """
    settings = settings or get_settings()
    period = Period(period)
    reference = _reference(now)

    window = period_window(period, reference)
    in_period = filter_window(transactions, window)
    income, expense, net = totals(in_period)

    return Aggregates(
        period=period,
        window=window,
        income=income,
        expense=expense,
        net=net,
        budget=budget_status(period, expense, budget, settings.budget_warning_ratio),
        filters_active=bool(filters and filters.is_active),
        display_list=display_list(transactions, in_period, filters, reference.tzinfo),
        category_breakdown=category_breakdown(in_period, categories, settings.unknown_label),
        trend=trend_series(transactions, reference, settings.trend_days, zero_fill_trend),
    )
