"""Tests for demand aggregation and load item edits."""

from dataclasses import replace

import pytest
from solarsizer.demand import (
    add_item,
    aggregate_critical_load,
    aggregate_demand,
    aggregate_night_load,
    item_daily_hours,
    remove_item,
    set_quantity,
    set_window_duration,
    summarize_demand,
    toggle_critical,
    toggle_selected,
    toggle_window,
)
from solarsizer.models import DEFAULT_WINDOWS, LoadItem, TimeWindow


def make_item(name, watts, active, selected=True, critical=False, quantity=1, minutes=None):
    minutes = minutes or {}
    windows = tuple(
        replace(w, active=w.name in active, duration_minutes=minutes.get(w.name))
        for w in DEFAULT_WINDOWS
    )
    return LoadItem(
        name=name,
        watts=watts,
        quantity=quantity,
        windows=windows,
        selected=selected,
        critical=critical,
    )


@pytest.fixture
def items():
    return (
        make_item("Fridge", 120, ["morning", "afternoon", "evening", "night"], critical=True),
        make_item("TV", 70, ["evening", "night"]),
        make_item("Kettle", 2000, ["morning"], minutes={"morning": 15}),
        make_item("Fan", 80, ["night"], selected=False),
        make_item("Bulb", 10, ["evening", "night"], quantity=6, critical=True),
    )


def test_window_spans():
    assert TimeWindow("morning", 6, 12).natural_hours == 6
    assert TimeWindow("night", 22, 6).natural_hours == 8
    assert TimeWindow("night", 22, 6).natural_minutes == 480
    assert TimeWindow("morning", 6, 12, True, 30).effective_hours == 0.5


def test_window_override_cannot_exceed_span():
    with pytest.raises(ValueError):
        TimeWindow("afternoon", 12, 17, True, 301)


def test_item_validation():
    with pytest.raises(ValueError):
        LoadItem(name="Bad", watts=0)
    with pytest.raises(ValueError):
        LoadItem(name="Bad", watts=10, quantity=0)
    with pytest.raises(ValueError):
        LoadItem(name="Bad", watts=10, windows=DEFAULT_WINDOWS + (DEFAULT_WINDOWS[0],))


def test_item_daily_hours(items):
    fridge, tv, kettle, _, _ = items
    assert item_daily_hours(fridge) == 24
    assert item_daily_hours(tv) == 13  # 5 evening + 8 night across midnight
    assert item_daily_hours(kettle) == 0.25


def test_aggregate_demand(items):
    expected = (120 * 24 + 70 * 13 + 2000 * 0.25 + 10 * 6 * 13) / 1000
    assert aggregate_demand(items) == pytest.approx(expected)


def test_unselected_items_ignored(items):
    fan = items[3]
    assert aggregate_demand([fan]) == 0


def test_aggregate_with_predicate(items):
    mornings = aggregate_demand(items, lambda w: w.name == "morning")
    assert mornings == pytest.approx((120 * 6 + 2000 * 0.25) / 1000)


def test_critical_load(items):
    expected = (120 * 24 + 10 * 6 * 13) / 1000
    assert aggregate_critical_load(items) == pytest.approx(expected)


def test_critical_requires_selected(items):
    items = toggle_selected(items, "Fridge")
    assert aggregate_critical_load(items) == pytest.approx(10 * 6 * 13 / 1000)


def test_night_load(items):
    expected = (120 * 8 + 70 * 8 + 10 * 6 * 8) / 1000
    assert aggregate_night_load(items) == pytest.approx(expected)


def test_empty():
    assert aggregate_demand([]) == 0
    assert aggregate_night_load([]) == 0


def test_summarize_demand(items):
    summary = summarize_demand(items)
    assert summary["selected_count"] == 4
    assert summary["total_kwh"] == round(aggregate_demand(items), 3)
    assert summary["night_kwh"] == round(aggregate_night_load(items), 3)


def test_edits_do_not_mutate(items):
    updated = toggle_selected(items, "Fan")
    assert items[3].selected is False
    assert updated[3].selected is True
    assert updated[0] is items[0]


def test_toggle_critical(items):
    updated = toggle_critical(items, "TV")
    assert updated[1].critical is True
    assert toggle_critical(updated, "TV")[1].critical is False


def test_set_quantity_clamped(items):
    assert set_quantity(items, "TV", 3)[1].quantity == 3
    assert set_quantity(items, "TV", 0)[1].quantity == 1


def test_toggle_window_on_sets_default_duration(items):
    updated = toggle_window(items, "TV", "morning")
    morning = updated[1].window("morning")
    assert morning.active is True
    assert morning.duration_minutes == 60


def test_toggle_window_off_clears_duration(items):
    updated = toggle_window(items, "Kettle", "morning")
    morning = updated[2].window("morning")
    assert morning.active is False
    assert morning.duration_minutes is None


def test_set_window_duration_clamped(items):
    updated = set_window_duration(items, "Kettle", "morning", 1000)
    assert updated[2].window("morning").duration_minutes == 360
    updated = set_window_duration(items, "Kettle", "morning", 0)
    assert updated[2].window("morning").duration_minutes == 1


def test_unknown_item(items):
    with pytest.raises(KeyError):
        toggle_selected(items, "Oven")
    with pytest.raises(KeyError):
        toggle_window(items, "TV", "midday")


def test_add_and_remove(items):
    oven = make_item("Oven", 1500, ["evening"], minutes={"evening": 45})
    updated = add_item(items, oven)
    assert len(updated) == 6
    with pytest.raises(ValueError):
        add_item(updated, oven)
    assert [i.name for i in remove_item(updated, "TV")] == ["Fridge", "Kettle", "Fan", "Bulb", "Oven"]
