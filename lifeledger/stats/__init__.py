"""Statistics package."""

from lifeledger.stats.engine import (
    budget_status,
    category_breakdown,
    compute_aggregates,
    display_list,
    filter_window,
    period_window,
    top_categories,
    totals,
    trend_series,
)

__all__ = [
    "budget_status",
    "category_breakdown",
    "compute_aggregates",
    "display_list",
    "filter_window",
    "period_window",
    "top_categories",
    "totals",
    "trend_series",
]
