"""Daily energy demand from appliance load items.

Load items are immutable; the edit helpers at the bottom return a new
tuple with one item replaced instead of changing anything in place.
"""

from dataclasses import replace
from typing import Callable, Iterable

from .models import LoadItem, TimeWindow

WindowPredicate = Callable[[TimeWindow], bool]

DEFAULT_WINDOW_MINUTES = 60  # duration assigned when a window is switched on


def item_daily_hours(item: LoadItem, predicate: WindowPredicate | None = None) -> float:
    """Total hours of use per day across the item's active windows."""
    return sum(
        w.effective_hours
        for w in item.windows
        if w.active and (predicate is None or predicate(w))
    )


def item_daily_energy(item: LoadItem, predicate: WindowPredicate | None = None) -> float:
    """Daily energy for one item in kWh."""
    return item.watts * item.quantity * item_daily_hours(item, predicate) / 1000


def aggregate_demand(
    items: Iterable[LoadItem], predicate: WindowPredicate | None = None
) -> float:
    """Total daily energy in kWh for the selected items.

    Args:
        items: Load items; unselected items are ignored
        predicate: Optional filter on time windows (default: all windows)
    """
    return sum(item_daily_energy(item, predicate) for item in items if item.selected)


def aggregate_critical_load(items: Iterable[LoadItem]) -> float:
    """Daily energy in kWh for selected items flagged as critical."""
    return aggregate_demand(item for item in items if item.critical)


def is_night(window: TimeWindow) -> bool:
    return window.name == "night"


def aggregate_night_load(items: Iterable[LoadItem]) -> float:
    """Daily energy in kWh drawn during the night window."""
    return aggregate_demand(items, is_night)


def summarize_demand(items: Iterable[LoadItem]) -> dict:
    """Total, critical and night demand for a set of load items."""
    items = list(items)
    return {
        "total_kwh": round(aggregate_demand(items), 3),
        "critical_kwh": round(aggregate_critical_load(items), 3),
        "night_kwh": round(aggregate_night_load(items), 3),
        "selected_count": sum(1 for item in items if item.selected),
    }


# Pure edits


def _index_of(items: tuple[LoadItem, ...], name: str) -> int:
    for i, item in enumerate(items):
        if item.name == name:
            return i
    raise KeyError(f"No load item named {name!r}")


def replace_item(items: Iterable[LoadItem], name: str, **changes) -> tuple[LoadItem, ...]:
    """Return a new collection with the named item's fields changed."""
    items = tuple(items)
    i = _index_of(items, name)
    return items[:i] + (replace(items[i], **changes),) + items[i + 1 :]


def _replace_window(item: LoadItem, window_name: str, **changes) -> tuple[TimeWindow, ...]:
    item.window(window_name)  # raises KeyError for unknown windows
    return tuple(replace(w, **changes) if w.name == window_name else w for w in item.windows)


def toggle_selected(items: Iterable[LoadItem], name: str) -> tuple[LoadItem, ...]:
    items = tuple(items)
    return replace_item(items, name, selected=not items[_index_of(items, name)].selected)


def toggle_critical(items: Iterable[LoadItem], name: str) -> tuple[LoadItem, ...]:
    items = tuple(items)
    return replace_item(items, name, critical=not items[_index_of(items, name)].critical)


def set_quantity(items: Iterable[LoadItem], name: str, quantity: int) -> tuple[LoadItem, ...]:
    """Set an item's quantity, clamped to at least 1."""
    return replace_item(items, name, quantity=max(1, int(quantity)))


def toggle_window(items: Iterable[LoadItem], name: str, window_name: str) -> tuple[LoadItem, ...]:
    """Switch a window on or off.

    Switching on assigns a one-hour default duration (or the full span if
    shorter); switching off clears any override.
    """
    items = tuple(items)
    item = items[_index_of(items, name)]
    window = item.window(window_name)
    if window.active:
        windows = _replace_window(item, window_name, active=False, duration_minutes=None)
    else:
        minutes = min(DEFAULT_WINDOW_MINUTES, window.natural_minutes)
        windows = _replace_window(item, window_name, active=True, duration_minutes=minutes)
    return replace_item(items, name, windows=windows)


def set_window_duration(
    items: Iterable[LoadItem], name: str, window_name: str, minutes: int
) -> tuple[LoadItem, ...]:
    """Set a window's duration override, clamped to [1, window span]."""
    items = tuple(items)
    item = items[_index_of(items, name)]
    window = item.window(window_name)
    minutes = max(1, min(int(minutes), window.natural_minutes))
    windows = _replace_window(item, window_name, duration_minutes=minutes)
    return replace_item(items, name, windows=windows)


def add_item(items: Iterable[LoadItem], item: LoadItem) -> tuple[LoadItem, ...]:
    """Append an item; names must be unique."""
    items = tuple(items)
    if any(existing.name == item.name for existing in items):
        raise ValueError(f"A load item named {item.name!r} already exists")
    return items + (item,)


def remove_item(items: Iterable[LoadItem], name: str) -> tuple[LoadItem, ...]:
    items = tuple(items)
    i = _index_of(items, name)
    return items[:i] + items[i + 1 :]
