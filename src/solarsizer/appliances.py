"""Appliance preset loading."""

from dataclasses import replace
from pathlib import Path
from typing import Iterable

import yaml

from .models import DEFAULT_WINDOWS, LoadItem

DEFAULT_APPLIANCES_PATH = Path(__file__).parent.parent.parent / "config" / "appliances.yaml"


def load_item_from_dict(data: dict) -> LoadItem:
    """Build a LoadItem from a preset entry.

    Windows listed under `windows` are switched on; `minutes` maps a
    window name to its duration override.
    """
    active = set(data.get("windows", []))
    minutes = data.get("minutes") or {}
    unknown = (active | set(minutes)) - {w.name for w in DEFAULT_WINDOWS}
    if unknown:
        raise ValueError(f"{data.get('name')}: unknown time windows {sorted(unknown)}")

    windows = tuple(
        replace(w, active=w.name in active, duration_minutes=minutes.get(w.name))
        for w in DEFAULT_WINDOWS
    )
    return LoadItem(
        name=data["name"],
        watts=data["watts"],
        quantity=data.get("quantity", 1),
        windows=windows,
        selected=data.get("selected", False),
        critical=data.get("critical", False),
        category=data.get("category", "custom"),
    )


def load_appliances_from_yaml(config_path: Path | None = None) -> tuple[LoadItem, ...]:
    """Load appliance presets (or a saved load list) from YAML."""
    path = config_path or DEFAULT_APPLIANCES_PATH
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    return tuple(load_item_from_dict(a) for a in data.get("appliances", []))


def filter_category(items: Iterable[LoadItem], category: str) -> tuple[LoadItem, ...]:
    return tuple(item for item in items if item.category == category)
