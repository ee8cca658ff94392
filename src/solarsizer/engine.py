"""Component sizing engine.

Turns daily energy demand, backup hours and worst-month yield into a
complete bill of components. Selection runs in a fixed order with no
backtracking:

1. Required array capacity from demand and derated yield.
2. System-size ceiling check.
3. Inverter: first catalog entry covering both peak load and PV input.
4. Panels: smallest unit size whose tier covers the array.
5. Battery bank: Tubular for 12V, Lithium for 24V/48V.
6. Cable and breaker sizing from DC/AC currents.
7. Accessories (SPD, AVR).
"""

import logging
import math

from .catalog import DEFAULT_CATALOG, Catalog
from .config import SizingPolicy
from .errors import CatalogExhaustedError, SizeCeilingExceeded
from .models import (
    Accessories,
    Advisory,
    BatteryBank,
    BatteryUnit,
    Breakers,
    Cables,
    ChargeController,
    InverterModel,
    PanelArray,
    PanelModel,
    SizingResult,
)
from .validation import validate_inputs, validate_yield

logger = logging.getLogger(__name__)

DERATING_FACTOR = 0.75  # system losses, temperature, soiling
MAX_ARRAY_WATTS = 12600

PEAK_DUTY_HOURS = 4  # daily energy drawn over ~4 hour-equivalents
SURGE_MARGIN = 1.5

BATTERY_BUFFER = 1.3
BATTERY_EFFICIENCY = 0.85
MAX_PARALLEL_STRINGS = 4  # more than this is inefficient to balance

DC_SAFETY_MARGIN = 1.25
AC_SAFETY_MARGIN = 1.1
AC_VOLTAGE = 230
AVR_THRESHOLD_WATTS = 5000

# (max current A, cable mm2); the last band catches everything above
DC_CABLE_BANDS = ((50, 16), (100, 25), (math.inf, 35))
AC_CABLE_BANDS = ((32, 6), (50, 10), (math.inf, 16))


def required_array(daily_energy_demand_kwh: float, worst_month_yield: float) -> tuple[float, float]:
    """Return (required kWp, required panel watts)."""
    required_kwp = daily_energy_demand_kwh / (worst_month_yield * DERATING_FACTOR)
    return required_kwp, required_kwp * 1000


def peak_power_needed(daily_energy_demand_kwh: float) -> float:
    """Worst-case instantaneous draw in W with surge margin."""
    return (daily_energy_demand_kwh * 1000) / PEAK_DUTY_HOURS * SURGE_MARGIN


def select_inverter(
    peak_power: float,
    required_panel_watts: float,
    catalog: Catalog = DEFAULT_CATALOG,
    fallback: str = "fail",
) -> tuple[InverterModel, Advisory | None]:
    """Pick the first inverter covering both the peak load and the PV input."""
    for inverter in catalog.inverters:
        if inverter.watts >= peak_power and inverter.max_pv_input >= required_panel_watts:
            return inverter, None

    if fallback == "fail" or not catalog.inverters:
        raise CatalogExhaustedError(
            "inverter",
            f"No suitable inverter found for {peak_power:.0f} W peak load "
            f"and {required_panel_watts:.0f} W PV input",
            value=peak_power,
            bound=max((i.watts for i in catalog.inverters), default=None),
        )

    closest = min(catalog.inverters, key=lambda inv: abs(inv.watts - peak_power))
    advisory = Advisory(
        kind="inverter-substitute",
        message=(
            f"No inverter covers {peak_power:.0f} W peak and {required_panel_watts:.0f} W PV input; "
            f"using the closest match ({closest.watts} W, {closest.max_pv_input} W max PV)"
        ),
        value=peak_power,
        bound=closest.watts,
    )
    return closest, advisory


def select_panels(required_kwp: float, catalog: Catalog = DEFAULT_CATALOG) -> PanelArray:
    """Pick the panel unit size for the array and count the units needed."""
    if not catalog.panels:
        raise CatalogExhaustedError("panel", "Catalog has no panel models")

    panel: PanelModel = next(
        (p for p in catalog.panels if required_kwp <= p.max_system_kw), catalog.panels[-1]
    )
    count = math.ceil(required_kwp * 1000 / panel.watts)
    return PanelArray(wattage=panel.watts, count=count, total_wattage=panel.watts * count)


def battery_energy_needed(
    daily_energy_demand_kwh: float, backup_hours: float, apply_efficiency: bool = True
) -> float:
    """Storage in kWh with the 30% buffer and optional efficiency loss."""
    energy = daily_energy_demand_kwh * backup_hours * BATTERY_BUFFER
    if apply_efficiency:
        energy /= BATTERY_EFFICIENCY
    return energy


def _bank(unit: BatteryUnit, parallel: int) -> BatteryBank:
    return BatteryBank(
        chemistry=unit.chemistry,
        capacity_ah=unit.capacity_ah,
        unit_kwh=unit.kwh,
        series=1,
        parallel=parallel,
        total_units=parallel,
    )


def _lithium_bank(units: list[BatteryUnit], energy_needed: float) -> BatteryBank:
    # Smallest single unit that covers the need, else parallel the largest
    for unit in sorted(units, key=lambda b: b.kwh):
        if unit.kwh >= energy_needed:
            return _bank(unit, 1)
    largest = max(units, key=lambda b: b.kwh)
    return _bank(largest, math.ceil(energy_needed / largest.kwh))


def select_battery(
    energy_needed: float,
    system_voltage: int,
    catalog: Catalog = DEFAULT_CATALOG,
    fallback: str = "fail",
) -> tuple[BatteryBank, Advisory | None]:
    """Size the battery bank for the system voltage."""
    if system_voltage == 12:
        tubular = catalog.tubular_unit()
        if tubular is not None:
            return _bank(tubular, math.ceil(energy_needed / tubular.kwh)), None
    else:
        units = catalog.lithium_units(system_voltage)
        if units:
            return _lithium_bank(units, energy_needed), None

    if fallback == "fail" or not catalog.batteries:
        raise CatalogExhaustedError(
            "battery",
            f"No battery unit available for a {system_voltage} V system",
            value=system_voltage,
        )

    nearest_voltage = min(
        (b.voltage for b in catalog.batteries), key=lambda v: abs(v - system_voltage)
    )
    units = [b for b in catalog.batteries if b.voltage == nearest_voltage]
    bank = _lithium_bank(units, energy_needed)
    advisory = Advisory(
        kind="battery-substitute",
        message=(
            f"No battery unit matches the {system_voltage} V bus; "
            f"using {bank.chemistry} {nearest_voltage} V units"
        ),
        value=system_voltage,
        bound=nearest_voltage,
    )
    return bank, advisory


def cable_size(current: float, bands: tuple[tuple[float, int], ...]) -> int:
    """Cable cross-section (mm2) for the band containing the current."""
    for max_current, size in bands:
        if current <= max_current:
            return size
    return bands[-1][1]


def size_system(
    daily_energy_demand_kwh: float,
    backup_hours: float,
    worst_month_yield: float,
    policy: SizingPolicy | None = None,
    catalog: Catalog = DEFAULT_CATALOG,
) -> SizingResult:
    """Size a complete off-grid system.

    Args:
        daily_energy_demand_kwh: Daily energy demand (0.1-100 kWh)
        backup_hours: Hours the battery must carry the load (8-24)
        worst_month_yield: Worst-month daily yield per kWp
        policy: Ceiling/fallback/efficiency behaviour (defaults if omitted)
        catalog: Component tables to select from

    Returns:
        SizingResult with every component selected

    Raises:
        DomainError: inputs outside the operational bounds
        SizeCeilingExceeded: oversized array under a strict policy
        CatalogExhaustedError: nothing fits and the policy is 'fail'
    """
    policy = policy or SizingPolicy()
    validate_inputs(daily_energy_demand_kwh, backup_hours)
    validate_yield(worst_month_yield)

    advisories = []

    required_kwp, required_watts = required_array(daily_energy_demand_kwh, worst_month_yield)

    exceeds_ceiling = required_watts > MAX_ARRAY_WATTS
    if exceeds_ceiling:
        message = (
            f"System design needs {required_watts / 1000:.2f} kWp, above the "
            f"{MAX_ARRAY_WATTS / 1000:.1f} kWp limit. Reduce energy consumption or improve efficiency."
        )
        if policy.strict_ceiling:
            raise SizeCeilingExceeded(message, value=required_watts, bound=MAX_ARRAY_WATTS)
        advisories.append(
            Advisory(kind="size-ceiling", message=message, value=required_watts, bound=MAX_ARRAY_WATTS)
        )

    peak = peak_power_needed(daily_energy_demand_kwh)
    try:
        inverter, advisory = select_inverter(peak, required_watts, catalog, policy.catalog_fallback)
    except CatalogExhaustedError as e:
        if not exceeds_ceiling:
            raise
        raise CatalogExhaustedError(
            e.component,
            f"{e} (the array also exceeds the {MAX_ARRAY_WATTS / 1000:.1f} kWp limit)",
            value=e.value,
            bound=e.bound,
        ) from SizeCeilingExceeded(advisories[-1].message, value=required_watts, bound=MAX_ARRAY_WATTS)
    if advisory:
        advisories.append(advisory)

    panels = select_panels(required_kwp, catalog)

    energy_needed = battery_energy_needed(
        daily_energy_demand_kwh, backup_hours, policy.apply_battery_efficiency_factor
    )
    battery, advisory = select_battery(energy_needed, inverter.voltage, catalog, policy.catalog_fallback)
    if advisory:
        advisories.append(advisory)
    if battery.parallel > MAX_PARALLEL_STRINGS:
        advisories.append(
            Advisory(
                kind="battery-parallel",
                message=(
                    f"{battery.parallel} batteries in parallel; more than "
                    f"{MAX_PARALLEL_STRINGS} may reduce efficiency"
                ),
                value=battery.parallel,
                bound=MAX_PARALLEL_STRINGS,
            )
        )

    max_dc_current = (panels.total_wattage / inverter.voltage) * DC_SAFETY_MARGIN
    max_ac_current = (inverter.watts / AC_VOLTAGE) * AC_SAFETY_MARGIN

    for a in advisories:
        logger.warning("%s: %s", a.kind, a.message)

    return SizingResult(
        system_voltage=inverter.voltage,
        inverter_rating=inverter.watts,
        battery=battery,
        panels=panels,
        charge_controller=ChargeController(type="Built-in MPPT", rating=inverter.mppt_amps),
        cables=Cables(
            dc_size_mm2=cable_size(max_dc_current, DC_CABLE_BANDS),
            ac_size_mm2=cable_size(max_ac_current, AC_CABLE_BANDS),
        ),
        breakers=Breakers(
            dc_rating=math.ceil(max_dc_current),
            ac_rating=math.ceil(max_ac_current),
        ),
        accessories=Accessories(spd=True, avr=inverter.watts >= AVR_THRESHOLD_WATTS),
        required_kwp=required_kwp,
        required_panel_watts=required_watts,
        peak_power_needed=peak,
        energy_needed_kwh=energy_needed,
        max_dc_current=max_dc_current,
        max_ac_current=max_ac_current,
        exceeds_ceiling=exceeds_ceiling,
        advisories=tuple(advisories),
    )
