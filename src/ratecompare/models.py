"""Data models for interval readings, tariffs and cost comparisons."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Reading:
    """A single interval reading (kWh for electricity, therms for gas)."""

    timestamp: datetime
    value: float


@dataclass
class ParseResult:
    """Normalized readings from one export file, plus data-quality warnings."""

    readings: list[Reading]
    warnings: list[str] = field(default_factory=list)
    skipped: int = 0


@dataclass
class TariffPeriod:
    """A recurring daily rate window.

    start_hour > end_hour means the window wraps past midnight
    (21 -> 15 covers 21:00-23:59 and 00:00-15:59).
    """

    name: str
    start_hour: int  # 0-23, inclusive
    end_hour: int  # 0-23, inclusive
    rate: float  # $/kWh
    summer_rate: float | None = None


@dataclass
class Tariff:
    """An electricity tariff: flat, tiered or time-of-use."""

    id: str
    name: str
    type: str  # 'flat', 'tiered' or 'tou'
    periods: list[TariffPeriod]
    fixed_monthly_charge: float = 0.0
    description: str = ""
    provider: str | None = None


@dataclass
class MonthlyBreakdown:
    """Usage and cost for one calendar month. Cost includes the fixed charge once."""

    month_key: str  # YYYY-MM
    usage: float
    cost: float


@dataclass
class DetailedCost:
    total_cost: float
    breakdown: list[MonthlyBreakdown]


@dataclass
class ComparisonResult:
    """One tariff's cost over the readings, scaled to a monthly estimate."""

    tariff_id: str
    tariff_name: str
    total_usage: float
    total_cost: float
    estimated_monthly_cost: float
    savings_vs_current: float  # positive means this tariff is cheaper
    breakdown: list[MonthlyBreakdown]


@dataclass
class GasTariff:
    """A two-tier monthly gas tariff (baseline / over-baseline)."""

    id: str
    name: str
    baseline_rate: float  # $/therm
    over_baseline_rate: float  # $/therm
    baseline_therms: float  # monthly allocation
    fixed_monthly_charge: float = 0.0
    description: str = ""


@dataclass
class GasDetailedCost:
    total_therms: float
    total_cost: float
    baseline_therms: float
    over_baseline_therms: float
    baseline_cost: float
    over_baseline_cost: float
    fixed_charges: float


@dataclass
class GasComparisonResult:
    tariff_id: str
    tariff_name: str
    total_usage: float  # therms
    total_cost: float
    estimated_monthly_cost: float
    breakdown: list[MonthlyBreakdown]


@dataclass
class LoadPreset:
    """A what-if appliance load added on top of measured usage."""

    id: str
    name: str
    monthly_kwh: float
    hourly_pattern: list[float]  # 24 shares of daily usage, hour 0-23
    seasonal_multiplier: list[float]  # winter, spring, summer, fall
    description: str = ""
    replaces_gas_therms: float = 0.0
    replaces_gas_appliance: str | None = None


@dataclass
class DataCoverage:
    """How much of the year a reading set covers."""

    start: datetime
    end: datetime
    days: int
    months: int
    has_summer: bool
    has_winter: bool
