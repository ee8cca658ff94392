import pytest
from solarsizer.appliances import filter_category, load_appliances_from_yaml, load_item_from_dict
from solarsizer.demand import aggregate_demand, item_daily_hours


def test_load_presets():
    items = load_appliances_from_yaml()
    names = [i.name for i in items]
    assert "LED Bulb" in names
    assert len(names) == len(set(names))
    assert all(not i.selected for i in items)
    assert aggregate_demand(items) == 0


def test_filter_category():
    items = load_appliances_from_yaml()
    office = filter_category(items, "office")
    assert office
    assert all(i.category == "office" for i in office)


def test_preset_windows_and_minutes():
    item = load_item_from_dict(
        {"name": "Kettle", "watts": 2000, "windows": ["morning", "evening"], "minutes": {"morning": 10}}
    )
    assert item.window("morning").active
    assert item.window("morning").duration_minutes == 10
    assert item.window("evening").duration_minutes is None
    assert not item.window("night").active
    assert item_daily_hours(item) == pytest.approx(10 / 60 + 5)


def test_unknown_window():
    with pytest.raises(ValueError, match="unknown time windows"):
        load_item_from_dict({"name": "X", "watts": 10, "windows": ["dawn"]})


def test_load_custom_file(tmp_path):
    path = tmp_path / "loads.yaml"
    path.write_text(
        "appliances:\n"
        "  - {name: Fridge, watts: 150, windows: [morning, afternoon, evening, night], selected: true, critical: true}\n"
        "  - {name: TV, watts: 100, quantity: 2, windows: [evening], selected: true}\n"
    )
    items = load_appliances_from_yaml(path)
    assert items[1].quantity == 2
    assert aggregate_demand(items) == pytest.approx((150 * 24 + 200 * 5) / 1000)
