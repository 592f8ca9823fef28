"""Tests for tiered and time-of-use cost calculation."""

from datetime import datetime, timedelta

import pytest

from ratecompare.analysis.costs import (
    MonthCounter,
    advance_counter,
    baseline_for_month,
    calculate_detailed_cost,
    tiered_rate,
)
from ratecompare.models import Reading, Tariff, TariffPeriod

FLAT = Tariff("flat", "Flat", "flat", [TariffPeriod("All", 0, 23, 0.38)])
FLAT_WITH_SUMMER = Tariff("flat-s", "Flat S", "flat", [TariffPeriod("All", 0, 23, 0.38, summer_rate=0.40)])
TOU_C = Tariff(
    "tou-c",
    "TOU-C",
    "tou",
    [
        TariffPeriod("Peak", 16, 20, 0.46, summer_rate=0.55),
        TariffPeriod("Off-Peak", 21, 15, 0.39, summer_rate=0.47),
    ],
)


def quarter_hours(start: datetime, count: int, kwh: float) -> list[Reading]:
    return [Reading(start + timedelta(minutes=15 * i), kwh) for i in range(count)]


def test_baseline_for_month():
    assert baseline_for_month(1) == 350
    assert baseline_for_month(7) == 270


def test_tiered_rate_boundaries():
    assert tiered_rate(1.0, 0, 100) == 1.0
    assert tiered_rate(1.0, 99.9, 100) == 1.0
    assert tiered_rate(1.0, 100, 100) == 1.28
    assert tiered_rate(1.0, 399, 100) == 1.28
    assert tiered_rate(1.0, 400, 100) == 1.45


def test_counter_resets_on_new_month():
    counter = MonthCounter(month=1, usage=500.0)
    counter = advance_counter(counter, Reading(datetime(2025, 2, 1), 1.0))
    assert counter == MonthCounter(month=2, usage=0.0)


class TestTiered:
    def test_under_winter_baseline(self):
        readings = quarter_hours(datetime(2025, 1, 1), 27, 10.0)
        result = calculate_detailed_cost(readings, FLAT)
        assert result.total_cost == pytest.approx(102.6)

    def test_summer_baseline_crosses_into_tier_2(self):
        """The rate is chosen by usage before each reading."""
        readings = quarter_hours(datetime(2025, 7, 1), 40, 10.0)
        result = calculate_detailed_cost(readings, FLAT)
        assert result.total_cost == pytest.approx(270 * 0.38 + 130 * 0.38 * 1.28)

    def test_all_three_tiers(self):
        readings = quarter_hours(datetime(2025, 7, 1), 120, 10.0)
        result = calculate_detailed_cost(readings, FLAT)
        assert result.total_cost == pytest.approx(562.704)

    def test_summer_rate_override(self):
        readings = quarter_hours(datetime(2025, 7, 1), 10, 1.0)
        result = calculate_detailed_cost(readings, FLAT_WITH_SUMMER)
        assert result.total_cost == pytest.approx(4.0)

    def test_month_change_resets_tiers(self):
        readings = quarter_hours(datetime(2025, 1, 1), 40, 10.0) + quarter_hours(datetime(2025, 2, 1), 10, 10.0)
        result = calculate_detailed_cost(readings, FLAT)

        by_month = {m.month_key: m for m in result.breakdown}
        assert by_month["2025-01"].cost == pytest.approx(157.32)
        assert by_month["2025-02"].cost == pytest.approx(38.0)

    def test_same_month_next_year_keeps_accumulating(self):
        readings = quarter_hours(datetime(2024, 12, 1), 35, 10.0) + [Reading(datetime(2025, 12, 1), 10.0)]
        result = calculate_detailed_cost(readings, FLAT)

        by_month = {m.month_key: m for m in result.breakdown}
        assert by_month["2025-12"].cost == pytest.approx(10 * 0.38 * 1.28)


class TestTimeOfUse:
    def test_winter_peak_and_off_peak(self):
        readings = [Reading(datetime(2025, 1, 15, 3), 1.0), Reading(datetime(2025, 1, 15, 17), 1.0)]
        result = calculate_detailed_cost(readings, TOU_C)
        assert result.total_cost == pytest.approx(0.85)

    def test_summer_peak(self):
        result = calculate_detailed_cost([Reading(datetime(2025, 7, 15, 17), 1.0)], TOU_C)
        assert result.total_cost == pytest.approx(0.55)

    def test_tou_ignores_tiers(self):
        readings = quarter_hours(datetime(2025, 1, 15, 0), 40, 10.0)
        result = calculate_detailed_cost(readings, TOU_C)
        assert result.total_cost == pytest.approx(400 * 0.39)


class TestBreakdown:
    def test_newest_month_first(self):
        readings = [
            Reading(datetime(2025, 1, 10), 1.0),
            Reading(datetime(2025, 2, 10), 2.0),
            Reading(datetime(2025, 3, 10), 3.0),
        ]
        result = calculate_detailed_cost(readings, FLAT)
        assert [m.month_key for m in result.breakdown] == ["2025-03", "2025-02", "2025-01"]
        assert [m.usage for m in result.breakdown] == [3.0, 2.0, 1.0]

    def test_fixed_charge_once_per_month(self):
        tariff = Tariff("fixed", "Fixed", "tou", [TariffPeriod("All", 0, 23, 0.5)], fixed_monthly_charge=10.0)
        readings = [
            Reading(datetime(2025, 1, 10), 2.0),
            Reading(datetime(2025, 1, 11), 2.0),
            Reading(datetime(2025, 2, 10), 4.0),
        ]
        result = calculate_detailed_cost(readings, tariff)

        assert [m.cost for m in result.breakdown] == pytest.approx([12.0, 12.0])
        assert result.total_cost == pytest.approx(24.0)

    @pytest.mark.parametrize("tariff", [FLAT, FLAT_WITH_SUMMER, TOU_C], ids=lambda t: t.id)
    def test_repeat_runs_are_identical(self, tariff):
        readings = quarter_hours(datetime(2025, 6, 30, 12), 120, 5.0)

        first = calculate_detailed_cost(readings, tariff)
        second = calculate_detailed_cost(readings, tariff)

        assert second.total_cost == first.total_cost
        assert second.breakdown == first.breakdown

    def test_tariffs_do_not_share_state(self):
        """Costing one tariff leaves no tier usage behind for the next."""
        readings = quarter_hours(datetime(2025, 1, 1), 40, 10.0)

        alone = calculate_detailed_cost(readings, FLAT)
        calculate_detailed_cost(readings, TOU_C)
        calculate_detailed_cost(readings, FLAT_WITH_SUMMER)
        after_others = calculate_detailed_cost(readings, FLAT)

        assert after_others == alone
        assert after_others.total_cost == pytest.approx(157.32)

    def test_no_readings(self):
        result = calculate_detailed_cost([], FLAT)
        assert result.total_cost == 0
        assert result.breakdown == []
