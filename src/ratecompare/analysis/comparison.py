"""Compare tariffs over the same readings and scale to a monthly estimate."""

import logging

from ..models import ComparisonResult, DetailedCost, Reading, Tariff
from .costs import calculate_detailed_cost

logger = logging.getLogger(__name__)

DAYS_PER_ESTIMATE = 30
MIN_SPAN_DAYS = 0.1


def days_in_readings(readings: list[Reading]) -> float:
    """Span between first and last reading in days, floored at MIN_SPAN_DAYS."""
    if not readings:
        return MIN_SPAN_DAYS
    span = readings[-1].timestamp - readings[0].timestamp
    return max(MIN_SPAN_DAYS, span.total_seconds() / 86400)


def monthly_estimate(calc: DetailedCost, tariff: Tariff, month_multiplier: float) -> float:
    """Scale only the energy portion, then add the fixed charge once."""
    energy_only = calc.total_cost - len(calc.breakdown) * tariff.fixed_monthly_charge
    return energy_only * month_multiplier + tariff.fixed_monthly_charge


def compare_tariffs(
    readings: list[Reading], current_tariff_id: str, tariffs: list[Tariff]
) -> list[ComparisonResult]:
    """Cost every tariff over the readings, in roster order.

    savings_vs_current is the current tariff's monthly estimate minus each
    tariff's estimate. An unknown current_tariff_id falls back to the first
    tariff in the roster.
    """
    if not readings or not tariffs:
        return []

    current = next((t for t in tariffs if t.id == current_tariff_id), tariffs[0])
    month_multiplier = DAYS_PER_ESTIMATE / days_in_readings(readings)
    total_usage = sum(r.value for r in readings)

    estimates = {}
    calcs = {}
    for tariff in tariffs:
        calcs[tariff.id] = calculate_detailed_cost(readings, tariff)
        estimates[tariff.id] = monthly_estimate(calcs[tariff.id], tariff, month_multiplier)

    current_estimate = estimates[current.id]

    results = []
    for tariff in tariffs:
        results.append(
            ComparisonResult(
                tariff_id=tariff.id,
                tariff_name=tariff.name,
                total_usage=total_usage,
                total_cost=calcs[tariff.id].total_cost,
                estimated_monthly_cost=estimates[tariff.id],
                savings_vs_current=current_estimate - estimates[tariff.id],
                breakdown=calcs[tariff.id].breakdown,
            )
        )

    logger.info(
        "Compared %d tariff(s) over %.1f days (x%.2f to monthly)",
        len(results),
        days_in_readings(readings),
        month_multiplier,
    )
    return results


def rank_for_display(results: list[ComparisonResult], current_tariff_id: str) -> list[ComparisonResult]:
    """Current tariff first, then the rest from cheapest to dearest."""
    current = [r for r in results if r.tariff_id == current_tariff_id]
    others = sorted(
        (r for r in results if r.tariff_id != current_tariff_id),
        key=lambda r: r.estimated_monthly_cost,
    )
    return current + others


def best_tariff(results: list[ComparisonResult]) -> ComparisonResult | None:
    """The result with the lowest monthly estimate."""
    if not results:
        return None
    return min(results, key=lambda r: r.estimated_monthly_cost)
