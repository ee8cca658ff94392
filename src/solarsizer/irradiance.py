"""Reduce a monthly yield series to the worst-month daily figure."""

from typing import Iterable

from .models import MonthlyYield

DEFAULT_WORST_MONTH_YIELD = 3.3  # kWh/kWp/day, used when no series is available
DAYS_PER_MONTH = 30


def worst_month(series: Iterable[MonthlyYield] | None) -> MonthlyYield | None:
    """The month with the lowest total yield (first one on ties)."""
    worst = None
    for entry in series or ():
        if worst is None or entry.value < worst.value:
            worst = entry
    return worst


def compute_worst_month_yield(series: Iterable[MonthlyYield] | None) -> float:
    """Daily average yield of the worst month for a 1 kWp array.

    Accepts an IrradianceSeries (measured or regional fallback alike) or
    any iterable of MonthlyYield. Returns DEFAULT_WORST_MONTH_YIELD when
    the series is missing or empty.
    """
    month = worst_month(series)
    if month is None:
        return DEFAULT_WORST_MONTH_YIELD
    return month.value / DAYS_PER_MONTH
