"""Operational bounds for sizing inputs."""

import math

from .errors import DomainError

MIN_DAILY_DEMAND_KWH = 0.1
MAX_DAILY_DEMAND_KWH = 100
MIN_BACKUP_HOURS = 8
MAX_BACKUP_HOURS = 24


def _check_range(field: str, value: float, low: float, high: float) -> None:
    # NaN fails every comparison, so test for membership rather than exclusion
    if low <= value <= high:
        return
    if math.isnan(value):
        raise DomainError(field, value, low, f"{field} must be a number between {low:g} and {high:g}, got nan")
    raise DomainError(field, value, low if value < low else high)


def validate_inputs(daily_energy_demand_kwh: float, backup_hours: float) -> None:
    """Raise DomainError if demand or backup hours are out of range."""
    _check_range("daily_energy_demand_kwh", daily_energy_demand_kwh, MIN_DAILY_DEMAND_KWH, MAX_DAILY_DEMAND_KWH)
    _check_range("backup_hours", backup_hours, MIN_BACKUP_HOURS, MAX_BACKUP_HOURS)


def validate_yield(worst_month_yield: float) -> None:
    """Raise DomainError for a yield that cannot be sized against."""
    if not math.isfinite(worst_month_yield) or worst_month_yield <= 0:
        raise DomainError(
            "worst_month_yield",
            worst_month_yield,
            0,
            f"worst_month_yield must be a positive finite number, got {worst_month_yield:g}",
        )
