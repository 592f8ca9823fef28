"""Tariff loading and per-interval rate resolution."""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import yaml
from dotenv import load_dotenv

from .models import GasTariff, LoadPreset, Tariff, TariffPeriod

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "RATECOMPARE_CONFIG"
TARIFF_TYPES = ("flat", "tiered", "tou")

# Calendar months (1-12) billed at summer rates
SUMMER_MONTHS = frozenset({6, 7, 8, 9})


class TariffConfigError(ValueError):
    """Raised when the tariff configuration is missing or invalid."""


@dataclass
class TariffConfig:
    """Everything read from tariffs.yaml."""

    tariffs: list[Tariff]
    gas_tariff: GasTariff | None = None
    load_presets: list[LoadPreset] = field(default_factory=list)

    def get_tariff(self, tariff_id: str) -> Tariff:
        for tariff in self.tariffs:
            if tariff.id == tariff_id:
                return tariff
        raise TariffConfigError(f"Unknown tariff: {tariff_id}")


def get_config_path(config_path: Path | None = None) -> Path:
    """Find the tariffs.yaml config file."""
    if config_path is not None:
        return config_path

    load_dotenv()
    from_env = os.environ.get(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env)

    candidates = [
        Path.cwd() / "config" / "tariffs.yaml",
        Path(__file__).parent.parent.parent / "config" / "tariffs.yaml",
        Path.home() / ".config" / "ratecompare" / "tariffs.yaml",
    ]
    for path in candidates:
        if path.exists():
            return path
    raise TariffConfigError("Could not find config/tariffs.yaml")


def _parse_period(data: dict) -> TariffPeriod:
    return TariffPeriod(
        name=data["name"],
        start_hour=int(data["start_hour"]),
        end_hour=int(data["end_hour"]),
        rate=float(data["rate"]),
        summer_rate=float(data["summer_rate"]) if data.get("summer_rate") is not None else None,
    )


def _parse_tariff(data: dict) -> Tariff:
    tariff_type = data.get("type", "flat")
    if tariff_type not in TARIFF_TYPES:
        raise TariffConfigError(f"Tariff {data['id']} has unknown type: {tariff_type}")

    periods = [_parse_period(p) for p in data.get("periods", [])]
    if not periods:
        raise TariffConfigError(f"Tariff {data['id']} has no rate periods")

    return Tariff(
        id=data["id"],
        name=data["name"],
        type=tariff_type,
        periods=periods,
        fixed_monthly_charge=float(data.get("fixed_monthly_charge", 0)),
        description=data.get("description", ""),
        provider=data.get("provider"),
    )


def _parse_gas_tariff(data: dict) -> GasTariff:
    return GasTariff(
        id=data["id"],
        name=data["name"],
        baseline_rate=float(data["baseline_rate"]),
        over_baseline_rate=float(data["over_baseline_rate"]),
        baseline_therms=float(data["baseline_therms"]),
        fixed_monthly_charge=float(data.get("fixed_monthly_charge", 0)),
        description=data.get("description", ""),
    )


def _parse_load_preset(data: dict) -> LoadPreset:
    return LoadPreset(
        id=data["id"],
        name=data["name"],
        monthly_kwh=float(data["monthly_kwh"]),
        hourly_pattern=[float(v) for v in data["hourly_pattern"]],
        seasonal_multiplier=[float(v) for v in data["seasonal_multiplier"]],
        description=data.get("description", ""),
        replaces_gas_therms=float(data.get("replaces_gas_therms", 0)),
        replaces_gas_appliance=data.get("replaces_gas_appliance"),
    )


def load_tariff_config(config_path: Path | None = None) -> TariffConfig:
    """Load tariffs, the gas tariff and load presets from YAML."""
    path = get_config_path(config_path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise TariffConfigError(f"Tariff config not found: {path}")

    gas = data.get("gas_tariff")
    config = TariffConfig(
        tariffs=[_parse_tariff(t) for t in data.get("tariffs", [])],
        gas_tariff=_parse_gas_tariff(gas) if gas else None,
        load_presets=[_parse_load_preset(p) for p in data.get("load_presets", [])],
    )
    logger.debug(
        "Loaded %d tariff(s) and %d load preset(s) from %s",
        len(config.tariffs),
        len(config.load_presets),
        path,
    )
    return config


def load_tariffs_from_yaml(config_path: Path | None = None) -> list[Tariff]:
    """Load the electricity tariff roster from YAML config file."""
    return load_tariff_config(config_path).tariffs


def is_summer(month: int) -> bool:
    return month in SUMMER_MONTHS


def effective_rate(period: TariffPeriod, month: int) -> float:
    """The period's rate for a calendar month (1-12), honouring any summer override."""
    if period.summer_rate is not None and is_summer(month):
        return period.summer_rate
    return period.rate


def hour_in_period(hour: int, period: TariffPeriod) -> bool:
    """Check if an hour falls within a period (inclusive, handles overnight windows)."""
    if period.start_hour <= period.end_hour:
        return period.start_hour <= hour <= period.end_hour
    else:
        # Overnight window (e.g., 21 to 15)
        return hour >= period.start_hour or hour <= period.end_hour


def find_period(tariff: Tariff, hour: int) -> TariffPeriod:
    """First period in declaration order containing the hour, else the first period."""
    for period in tariff.periods:
        if hour_in_period(hour, period):
            return period
    return tariff.periods[0]


def get_tou_rate(dt: datetime, tariff: Tariff) -> float:
    """Time-of-use rate in $/kWh for an interval starting at dt."""
    return effective_rate(find_period(tariff, dt.hour), dt.month)
