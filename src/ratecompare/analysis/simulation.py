"""What-if overlay: add simulated appliance load to measured readings."""

from ..models import LoadPreset, Reading
from .coverage import AVERAGE_DAYS_PER_MONTH


def season_index(month: int) -> int:
    """0 winter (Dec-Feb), 1 spring (Mar-May), 2 summer (Jun-Aug), 3 fall (Sep-Nov)."""
    if month in (12, 1, 2):
        return 0
    if month <= 5:
        return 1
    if month <= 8:
        return 2
    return 3


def simulated_interval_kwh(load: LoadPreset, month: int, hour: int, interval_minutes: int) -> float:
    """kWh a load adds to one interval starting at the given month and hour."""
    daily_kwh = load.monthly_kwh * load.seasonal_multiplier[season_index(month)] / AVERAGE_DAYS_PER_MONTH
    return daily_kwh * load.hourly_pattern[hour] * interval_minutes / 60


def apply_simulated_loads(
    readings: list[Reading], loads: list[LoadPreset], interval_minutes: int = 15
) -> list[Reading]:
    """New readings with every load's share added. The input is left untouched."""
    if not loads:
        return list(readings)

    return [
        Reading(
            timestamp=r.timestamp,
            value=r.value
            + sum(
                simulated_interval_kwh(load, r.timestamp.month, r.timestamp.hour, interval_minutes)
                for load in loads
            ),
        )
        for r in readings
    ]


def simulated_monthly_kwh(loads: list[LoadPreset]) -> float:
    return sum(load.monthly_kwh for load in loads)
