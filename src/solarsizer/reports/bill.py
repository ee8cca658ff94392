"""Render a sizing result as a bill of components."""

from ..engine import MAX_ARRAY_WATTS
from ..models import SizingResult


def result_to_dict(result: SizingResult) -> dict:
    """JSON-ready representation of a sizing result."""
    return {
        "system_voltage": result.system_voltage,
        "inverter_rating": result.inverter_rating,
        "battery_type": result.battery_type,
        "battery": {
            "type": result.battery.chemistry,
            "capacity_ah": round(result.battery.capacity_ah, 1),
            "unit_kwh": result.battery.unit_kwh,
            "series": result.battery.series,
            "parallel": result.battery.parallel,
            "total_units": result.battery.total_units,
            "total_kwh": round(result.battery.total_kwh, 2),
        },
        "solar_panels": {
            "wattage": result.panels.wattage,
            "count": result.panels.count,
            "total_wattage": result.panels.total_wattage,
        },
        "charge_controller": {
            "type": result.charge_controller.type,
            "rating": result.charge_controller.rating,
            "count": result.charge_controller.count,
        },
        "cables": {
            "dc_size_mm2": result.cables.dc_size_mm2,
            "ac_size_mm2": result.cables.ac_size_mm2,
        },
        "breakers": {
            "dc_rating": result.breakers.dc_rating,
            "ac_rating": result.breakers.ac_rating,
        },
        "other_components": {
            "spd": result.accessories.spd,
            "avr": result.accessories.avr,
        },
        "derived": {
            "required_kwp": round(result.required_kwp, 3),
            "required_panel_watts": round(result.required_panel_watts, 1),
            "peak_power_needed": round(result.peak_power_needed, 1),
            "energy_needed_kwh": round(result.energy_needed_kwh, 2),
            "max_dc_current": round(result.max_dc_current, 2),
            "max_ac_current": round(result.max_ac_current, 2),
        },
        "exceeds_ceiling": result.exceeds_ceiling,
        "advisories": [
            {"kind": a.kind, "message": a.message, "value": a.value, "bound": a.bound}
            for a in result.advisories
        ],
    }


def format_bill_text(result: SizingResult, demand: dict | None = None) -> str:
    """Format a sizing result as human-readable text."""
    lines = []
    if demand:
        lines.extend([
            "Energy Demand:",
            f"  - Total: {demand['total_kwh']:.2f} kWh/day",
            f"  - Critical loads: {demand['critical_kwh']:.2f} kWh/day",
            f"  - Night loads: {demand['night_kwh']:.2f} kWh/day",
            "",
        ])

    battery = result.battery
    panels = result.panels
    lines.extend([
        f"System Design ({result.system_voltage}V)",
        f"- Inverter: {result.inverter_rating / 1000:.1f} kVA hybrid",
        f"- Batteries: {battery.total_units} x {battery.chemistry} "
        f"{battery.capacity_ah:.0f}Ah ({battery.series}S{battery.parallel}P, {battery.total_kwh:.1f} kWh)",
        f"- Solar panels: {panels.count} x {panels.wattage}W ({panels.total_wattage / 1000:.2f} kWp)",
        f"- Charge controller: {result.charge_controller.type} {result.charge_controller.rating}A",
        f"- DC cable: {result.cables.dc_size_mm2} mm², breaker {result.breakers.dc_rating}A",
        f"- AC cable: {result.cables.ac_size_mm2} mm², breaker {result.breakers.ac_rating}A",
        f"- Surge protection device: {'Yes' if result.accessories.spd else 'No'}",
        f"- Automatic voltage regulator: {'Yes' if result.accessories.avr else 'No'}",
    ])

    if result.exceeds_ceiling:
        lines.extend([
            "",
            f"Warning: system exceeds the recommended {MAX_ARRAY_WATTS / 1000:.1f} kWp maximum",
        ])

    if result.advisories:
        lines.append("")
        lines.append("Advisories:")
        for a in result.advisories:
            lines.append(f"  - {a.message}")

    return "\n".join(lines)
