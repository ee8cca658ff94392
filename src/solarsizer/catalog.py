"""Static catalog of available inverters, batteries and panels."""

from dataclasses import dataclass

from .models import BatteryUnit, InverterModel, PanelModel

# Hybrid inverters, ascending by rated power. Max PV input is 1.2x rated power.
INVERTERS = (
    InverterModel(watts=2000, voltage=12, mppt_amps=80, max_pv_input=2400),  # 2kVA
    InverterModel(watts=3600, voltage=24, mppt_amps=120, max_pv_input=4320),  # 3.6kVA
    InverterModel(watts=4200, voltage=24, mppt_amps=120, max_pv_input=5040),  # 4.2kVA
    InverterModel(watts=6200, voltage=48, mppt_amps=120, max_pv_input=7440),  # 6.2kVA
    InverterModel(watts=8200, voltage=48, mppt_amps=120, max_pv_input=9840),  # 8.2kVA
    InverterModel(watts=10200, voltage=48, mppt_amps=120, max_pv_input=12240),  # 10.2kVA
)

BATTERIES = (
    BatteryUnit(chemistry="Tubular", voltage=12, kwh=2.64, ah=220),
    BatteryUnit(chemistry="Lithium", voltage=24, kwh=5),
    BatteryUnit(chemistry="Lithium", voltage=48, kwh=5),
    BatteryUnit(chemistry="Lithium", voltage=48, kwh=7.6),
    BatteryUnit(chemistry="Lithium", voltage=48, kwh=10),
    BatteryUnit(chemistry="Lithium", voltage=48, kwh=15.5),
)

# Panel unit size recommended up to the given system capacity (kWp)
PANELS = (
    PanelModel(watts=400, max_system_kw=2.4),
    PanelModel(watts=550, max_system_kw=6),
    PanelModel(watts=600, max_system_kw=10.2),
)


@dataclass(frozen=True)
class Catalog:
    """A read-only set of catalog tables."""

    inverters: tuple[InverterModel, ...] = INVERTERS
    batteries: tuple[BatteryUnit, ...] = BATTERIES
    panels: tuple[PanelModel, ...] = PANELS

    def lithium_units(self, voltage: int | None = None) -> list[BatteryUnit]:
        """Lithium units in catalog order, optionally at one voltage."""
        return [
            b
            for b in self.batteries
            if b.chemistry == "Lithium" and (voltage is None or b.voltage == voltage)
        ]

    def tubular_unit(self) -> BatteryUnit | None:
        """The Tubular unit used for 12V systems."""
        for b in self.batteries:
            if b.chemistry == "Tubular":
                return b
        return None


DEFAULT_CATALOG = Catalog()
