"""Gas bill calculation on a two-tier monthly baseline."""

from ..models import GasComparisonResult, GasDetailedCost, GasTariff, LoadPreset, MonthlyBreakdown, Reading
from .costs import month_key


def monthly_therms(readings: list[Reading]) -> dict[str, float]:
    """Total therms per YYYY-MM month key."""
    totals: dict[str, float] = {}
    for reading in readings:
        key = month_key(reading)
        totals[key] = totals.get(key, 0.0) + reading.value
    return totals


def split_baseline(usage: float, tariff: GasTariff) -> tuple[float, float]:
    """(baseline therms, over-baseline therms) for one month's usage."""
    baseline = min(usage, tariff.baseline_therms)
    over = max(0.0, usage - tariff.baseline_therms)
    return baseline, over


def calculate_gas_cost(readings: list[Reading], tariff: GasTariff) -> GasDetailedCost:
    """Baseline/over-baseline split and total cost across all months."""
    totals = monthly_therms(readings)

    baseline_therms = over_baseline_therms = 0.0
    for usage in totals.values():
        baseline, over = split_baseline(usage, tariff)
        baseline_therms += baseline
        over_baseline_therms += over

    baseline_cost = baseline_therms * tariff.baseline_rate
    over_baseline_cost = over_baseline_therms * tariff.over_baseline_rate
    fixed_charges = len(totals) * tariff.fixed_monthly_charge

    return GasDetailedCost(
        total_therms=sum(totals.values()),
        total_cost=baseline_cost + over_baseline_cost + fixed_charges,
        baseline_therms=baseline_therms,
        over_baseline_therms=over_baseline_therms,
        baseline_cost=baseline_cost,
        over_baseline_cost=over_baseline_cost,
        fixed_charges=fixed_charges,
    )


def calculate_gas_monthly_breakdown(readings: list[Reading], tariff: GasTariff) -> list[MonthlyBreakdown]:
    """Per-month usage and cost (including the fixed charge), oldest month first."""
    breakdown = []
    for key, usage in sorted(monthly_therms(readings).items()):
        baseline, over = split_baseline(usage, tariff)
        cost = baseline * tariff.baseline_rate + over * tariff.over_baseline_rate + tariff.fixed_monthly_charge
        breakdown.append(MonthlyBreakdown(month_key=key, usage=usage, cost=cost))
    return breakdown


def calculate_gas_comparison(readings: list[Reading], tariff: GasTariff) -> GasComparisonResult:
    """Total gas cost and its average over the months observed.

    Gas is billed monthly already, so there is no window scaling here.
    """
    breakdown = calculate_gas_monthly_breakdown(readings, tariff)
    total_cost = sum(m.cost for m in breakdown)

    return GasComparisonResult(
        tariff_id=tariff.id,
        tariff_name=tariff.name,
        total_usage=sum(m.usage for m in breakdown),
        total_cost=total_cost,
        estimated_monthly_cost=total_cost / len(breakdown) if breakdown else 0.0,
        breakdown=breakdown,
    )


def calculate_gas_savings_from_electrification(loads: list[LoadPreset], tariff: GasTariff) -> dict:
    """Monthly gas savings when electric loads replace gas appliances.

    Offset therms are priced at the mean of the baseline and over-baseline
    rates. Returns dict with 'monthly_savings', 'monthly_therms_offset' and
    'appliances'.
    """
    therms_offset = 0.0
    appliances = []
    for load in loads:
        if load.replaces_gas_therms > 0:
            therms_offset += load.replaces_gas_therms
            if load.replaces_gas_appliance:
                appliances.append(load.replaces_gas_appliance)

    average_rate = (tariff.baseline_rate + tariff.over_baseline_rate) / 2
    return {
        "monthly_savings": therms_offset * average_rate,
        "monthly_therms_offset": therms_offset,
        "appliances": appliances,
    }
