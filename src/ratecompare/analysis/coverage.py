"""Data coverage statistics for a reading set."""

from ..models import DataCoverage, Reading
from ..tariffs import is_summer

AVERAGE_DAYS_PER_MONTH = 30.44
WINTER_MONTHS = frozenset({11, 12, 1, 2})


def data_coverage(readings: list[Reading]) -> DataCoverage | None:
    """Span of the readings and which seasons they include.

    Returns None for fewer than 2 readings. Readings must be sorted.
    """
    if len(readings) < 2:
        return None

    start = readings[0].timestamp
    end = readings[-1].timestamp
    days = round((end - start).total_seconds() / 86400)

    return DataCoverage(
        start=start,
        end=end,
        days=days,
        months=round(days / AVERAGE_DAYS_PER_MONTH),
        has_summer=any(is_summer(r.timestamp.month) for r in readings),
        has_winter=any(r.timestamp.month in WINTER_MONTHS for r in readings),
    )
