"""Monthly cost calculation for flat, tiered and time-of-use tariffs."""

import logging
from typing import NamedTuple

from ..models import DetailedCost, MonthlyBreakdown, Reading, Tariff
from ..tariffs import effective_rate, get_tou_rate, is_summer

logger = logging.getLogger(__name__)

# Monthly baseline allowance (kWh) for tiered billing
SUMMER_BASELINE_KWH = 270
WINTER_BASELINE_KWH = 350

# Tier multipliers on the base rate. Tier 2 runs from baseline to
# TIER_3_BASELINE_FACTOR x baseline, tier 3 is everything above that.
TIER_2_MULTIPLIER = 1.28
TIER_3_MULTIPLIER = 1.45
TIER_3_BASELINE_FACTOR = 4


class MonthCounter(NamedTuple):
    """Usage accumulated so far in the current billing month."""

    month: int | None
    usage: float


def month_key(reading: Reading) -> str:
    return f"{reading.timestamp.year}-{reading.timestamp.month:02d}"


def baseline_for_month(month: int) -> float:
    return SUMMER_BASELINE_KWH if is_summer(month) else WINTER_BASELINE_KWH


def tiered_rate(base_rate: float, usage_so_far: float, baseline: float) -> float:
    """Rate for the next unit given how much has been used this month."""
    if usage_so_far < baseline:
        return base_rate
    if usage_so_far < baseline * TIER_3_BASELINE_FACTOR:
        return base_rate * TIER_2_MULTIPLIER
    return base_rate * TIER_3_MULTIPLIER


def advance_counter(counter: MonthCounter, reading: Reading) -> MonthCounter:
    """Reset the counter when the reading's month differs from the tracked one.

    Only the month-of-year is compared, so a gap from one December straight
    to the next keeps accumulating.
    """
    month = reading.timestamp.month
    if month != counter.month:
        return MonthCounter(month=month, usage=0.0)
    return counter


def interval_rate(reading: Reading, tariff: Tariff, counter: MonthCounter) -> float:
    """Price per unit for one reading under a tariff."""
    if tariff.type == "tou":
        return get_tou_rate(reading.timestamp, tariff)

    month = reading.timestamp.month
    base_rate = effective_rate(tariff.periods[0], month)
    return tiered_rate(base_rate, counter.usage, baseline_for_month(month))


def calculate_detailed_cost(readings: list[Reading], tariff: Tariff) -> DetailedCost:
    """Total cost and per-month breakdown (newest month first) for a tariff.

    Readings must be in chronological order. Each month in the breakdown
    includes the fixed monthly charge once.
    """
    months: dict[str, list[float]] = {}  # month_key -> [usage, energy cost]
    energy_total = 0.0
    counter = MonthCounter(month=None, usage=0.0)

    for reading in readings:
        counter = advance_counter(counter, reading)
        cost = reading.value * interval_rate(reading, tariff, counter)

        totals = months.setdefault(month_key(reading), [0.0, 0.0])
        totals[0] += reading.value
        totals[1] += cost
        energy_total += cost
        counter = MonthCounter(month=counter.month, usage=counter.usage + reading.value)

    breakdown = [
        MonthlyBreakdown(month_key=key, usage=usage, cost=cost + tariff.fixed_monthly_charge)
        for key, (usage, cost) in months.items()
    ]
    breakdown.sort(key=lambda m: m.month_key, reverse=True)

    total_cost = energy_total + len(breakdown) * tariff.fixed_monthly_charge
    logger.debug("%s: %.2f over %d month(s)", tariff.id, total_cost, len(breakdown))
    return DetailedCost(total_cost=total_cost, breakdown=breakdown)
