"""Tests for the simulated load overlay."""

from datetime import datetime

import pytest

from ratecompare.analysis.simulation import (
    AVERAGE_DAYS_PER_MONTH,
    apply_simulated_loads,
    season_index,
    simulated_interval_kwh,
    simulated_monthly_kwh,
)
from ratecompare.models import LoadPreset, Reading

NIGHT_ONLY = [0.0] * 24
NIGHT_ONLY[2] = 1.0

EV = LoadPreset(
    id="ev",
    name="EV",
    monthly_kwh=304.4,
    hourly_pattern=NIGHT_ONLY,
    seasonal_multiplier=[2.0, 1.0, 0.5, 1.0],
)


@pytest.mark.parametrize(
    "month, expected",
    [(12, 0), (1, 0), (2, 0), (3, 1), (5, 1), (6, 2), (8, 2), (9, 3), (11, 3)],
)
def test_season_index(month, expected):
    assert season_index(month) == expected


def test_interval_share():
    """10 kWh/day in spring, all at 2 AM, split over four 15 minute intervals."""
    assert EV.monthly_kwh / AVERAGE_DAYS_PER_MONTH == pytest.approx(10.0)
    assert simulated_interval_kwh(EV, 4, 2, 15) == pytest.approx(2.5)
    assert simulated_interval_kwh(EV, 1, 2, 15) == pytest.approx(5.0)
    assert simulated_interval_kwh(EV, 7, 2, 60) == pytest.approx(5.0)
    assert simulated_interval_kwh(EV, 4, 14, 15) == 0


def test_apply_simulated_loads():
    readings = [Reading(datetime(2025, 4, 1, 2, 15), 0.1), Reading(datetime(2025, 4, 1, 14, 0), 0.3)]
    result = apply_simulated_loads(readings, [EV, EV])

    assert result[0].value == pytest.approx(5.1)
    assert result[1].value == pytest.approx(0.3)
    assert [r.timestamp for r in result] == [r.timestamp for r in readings]
    assert readings[0].value == 0.1


def test_no_loads_copies_readings():
    readings = [Reading(datetime(2025, 4, 1), 0.1)]
    result = apply_simulated_loads(readings, [])
    assert result == readings
    assert result is not readings


def test_simulated_monthly_kwh():
    assert simulated_monthly_kwh([EV, EV]) == pytest.approx(608.8)
    assert simulated_monthly_kwh([]) == 0
