"""Data models for loads, irradiance, catalog entries and sizing results."""

from dataclasses import dataclass, field
from typing import Iterator

WINDOW_NAMES = ("morning", "afternoon", "evening", "night")
CATEGORIES = ("home", "office", "custom")


@dataclass(frozen=True)
class TimeWindow:
    """A fixed daily time-of-use window."""

    name: str
    start: int  # hour of day, 24-hour format
    end: int  # hour of day, may be < start for windows crossing midnight
    active: bool = False
    duration_minutes: int | None = None  # override for short-use appliances

    def __post_init__(self):
        if self.name not in WINDOW_NAMES:
            raise ValueError(f"Unknown time window: {self.name}")
        if not (0 <= self.start <= 24 and 0 <= self.end <= 24):
            raise ValueError(f"Window hours must be within 0-24, got {self.start}-{self.end}")
        if self.duration_minutes is not None:
            if self.duration_minutes < 0:
                raise ValueError("duration_minutes must not be negative")
            if self.duration_minutes > self.natural_minutes:
                raise ValueError(
                    f"{self.name} override of {self.duration_minutes} min exceeds "
                    f"the window span of {self.natural_minutes} min"
                )

    @property
    def natural_hours(self) -> int:
        """Span of the window in hours (handles windows crossing midnight)."""
        if self.end > self.start:
            return self.end - self.start
        return (24 - self.start) + self.end

    @property
    def natural_minutes(self) -> int:
        return self.natural_hours * 60

    @property
    def effective_hours(self) -> float:
        """Hours of use: the override when set, else the full span."""
        if self.duration_minutes:
            return self.duration_minutes / 60
        return self.natural_hours


DEFAULT_WINDOWS = (
    TimeWindow("morning", 6, 12),
    TimeWindow("afternoon", 12, 17),
    TimeWindow("evening", 17, 22),
    TimeWindow("night", 22, 6),
)


@dataclass(frozen=True)
class LoadItem:
    """An appliance or device drawing power during one or more windows."""

    name: str
    watts: float
    quantity: int = 1
    windows: tuple[TimeWindow, ...] = DEFAULT_WINDOWS
    selected: bool = False
    critical: bool = False
    category: str = "custom"

    def __post_init__(self):
        if self.watts <= 0:
            raise ValueError(f"{self.name}: watts must be positive")
        if self.quantity < 1:
            raise ValueError(f"{self.name}: quantity must be at least 1")
        if len(self.windows) > len(WINDOW_NAMES):
            raise ValueError(f"{self.name}: at most {len(WINDOW_NAMES)} time windows allowed")
        names = [w.name for w in self.windows]
        if len(set(names)) != len(names):
            raise ValueError(f"{self.name}: duplicate time windows")
        if self.category not in CATEGORIES:
            raise ValueError(f"{self.name}: unknown category {self.category}")

    def window(self, name: str) -> TimeWindow:
        """Look up a time window by name."""
        for w in self.windows:
            if w.name == name:
                return w
        raise KeyError(f"{self.name} has no {name} window")


@dataclass(frozen=True)
class MonthlyYield:
    """Monthly PV yield for a 1 kWp reference array."""

    month: int  # 1-12
    value: float  # kWh accumulated over the month

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValueError(f"month must be 1-12, got {self.month}")
        if self.value < 0:
            raise ValueError(f"Yield for month {self.month} must not be negative")


@dataclass(frozen=True)
class IrradianceSeries:
    """Twelve monthly yield entries for a site."""

    months: tuple[MonthlyYield, ...]
    source: str = "pvgis"  # 'pvgis' or 'fallback:<region>'

    def __post_init__(self):
        if len(self.months) != 12:
            raise ValueError(f"Expected 12 monthly entries, got {len(self.months)}")
        if len({m.month for m in self.months}) != 12:
            raise ValueError("Monthly entries must cover each month exactly once")

    def __iter__(self) -> Iterator[MonthlyYield]:
        return iter(self.months)

    def __len__(self) -> int:
        return len(self.months)

    @property
    def is_estimated(self) -> bool:
        """True when the series is a regional average, not measured data."""
        return self.source.startswith("fallback")


# Catalog entries


@dataclass(frozen=True)
class InverterModel:
    """A hybrid inverter with a built-in MPPT charge controller."""

    watts: int
    voltage: int  # DC bus voltage
    mppt_amps: int
    max_pv_input: int  # W


@dataclass(frozen=True)
class BatteryUnit:
    """A single battery unit."""

    chemistry: str  # 'Tubular' or 'Lithium'
    voltage: int
    kwh: float
    ah: float | None = None  # reference rating for Tubular units

    @property
    def capacity_ah(self) -> float:
        """Amp-hour rating, derived from kWh when not declared."""
        if self.ah is not None:
            return self.ah
        return self.kwh * 1000 / self.voltage


@dataclass(frozen=True)
class PanelModel:
    """A panel unit size and the largest system it is recommended for."""

    watts: int
    max_system_kw: float


# Sizing output


@dataclass(frozen=True)
class Advisory:
    """A non-blocking sizing warning."""

    kind: str  # 'size-ceiling', 'inverter-substitute', 'battery-substitute', 'battery-parallel'
    message: str
    value: float | None = None
    bound: float | None = None


@dataclass(frozen=True)
class BatteryBank:
    chemistry: str
    capacity_ah: float  # per unit
    unit_kwh: float
    series: int
    parallel: int
    total_units: int

    @property
    def total_kwh(self) -> float:
        return self.unit_kwh * self.total_units


@dataclass(frozen=True)
class PanelArray:
    wattage: int
    count: int
    total_wattage: int


@dataclass(frozen=True)
class ChargeController:
    type: str
    rating: int  # A
    count: int = 1


@dataclass(frozen=True)
class Cables:
    dc_size_mm2: int
    ac_size_mm2: int


@dataclass(frozen=True)
class Breakers:
    dc_rating: int  # A
    ac_rating: int  # A


@dataclass(frozen=True)
class Accessories:
    spd: bool  # surge protection device
    avr: bool  # automatic voltage regulator


@dataclass(frozen=True)
class SizingResult:
    """The complete bill of components for one sizing call."""

    system_voltage: int
    inverter_rating: int
    battery: BatteryBank
    panels: PanelArray
    charge_controller: ChargeController
    cables: Cables
    breakers: Breakers
    accessories: Accessories

    # Derived figures the selection was based on
    required_kwp: float
    required_panel_watts: float
    peak_power_needed: float
    energy_needed_kwh: float
    max_dc_current: float
    max_ac_current: float

    exceeds_ceiling: bool = False
    advisories: tuple[Advisory, ...] = field(default_factory=tuple)

    @property
    def battery_type(self) -> str:
        return self.battery.chemistry
