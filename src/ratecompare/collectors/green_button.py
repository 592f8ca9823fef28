"""Green Button interval CSV importer.

Turns an electricity (kWh) or gas (therm) "Download My Data" CSV export into
sorted, de-duplicated readings. Column names, date formats and the length of
the metadata preamble vary between utilities and export dates, so every step
is heuristic:

1. Tokenize rows and find the header row by score.
2. Resolve the usage column and every available timestamp column.
3. For each data row, take the usage value and the first timestamp strategy
   that succeeds; rows that fail either are skipped and counted.
4. Sort, sum readings that share a timestamp, and check the interval size.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from functools import partial

from ..models import ParseResult, Reading
from .csv_rows import parse_csv_rows
from .fields import parse_date_time, parse_datetime_field, parse_number
from .headers import ColumnMap, detect_header_row, normalize_header, resolve_columns

logger = logging.getLogger(__name__)

TimestampResolver = Callable[[list[str]], datetime | None]


class GreenButtonParseError(ValueError):
    """Raised when an export file cannot yield any interval readings."""


@dataclass(frozen=True)
class MeterProfile:
    """Everything that differs between electricity and gas exports."""

    unit_keyword: str
    min_header_score: int
    usage_pattern: re.Pattern
    nominal_interval: timedelta
    net_metering: bool
    interval_unit: timedelta  # granularity of the interval-size check
    expected_intervals: tuple[int, ...]
    interval_sample_size: int
    header_error: str
    usage_column_error: str
    no_readings_error: str
    skipped_warning: str
    interval_warning: str


ELECTRICITY = MeterProfile(
    unit_keyword="kwh",
    min_header_score=4,
    usage_pattern=re.compile(r"usage|consumption|quantity|value|interval"),
    nominal_interval=timedelta(minutes=15),
    net_metering=True,
    interval_unit=timedelta(minutes=1),
    expected_intervals=(15, 30, 60),
    interval_sample_size=2000,
    header_error=(
        "Could not detect a header row with kWh interval data. "
        'If this is a Green Button export, re-export as "Interval Data (CSV)".'
    ),
    usage_column_error="Could not find a kWh/usage column in this CSV.",
    no_readings_error="No interval readings were parsed from this CSV.",
    skipped_warning="Skipped {count} row(s) that didn't look like interval readings.",
    interval_warning="Detected ~{size} minute intervals (expected 15/30/60). Data may be aggregated.",
)

GAS = MeterProfile(
    unit_keyword="therm",
    min_header_score=3,
    usage_pattern=re.compile(r"usage|consumption|quantity|value"),
    nominal_interval=timedelta(hours=1),
    net_metering=False,
    interval_unit=timedelta(hours=1),
    expected_intervals=(1, 24),
    interval_sample_size=500,
    header_error=(
        "Could not detect a header row with gas (therm) interval data. "
        "Make sure this is a gas Green Button export."
    ),
    usage_column_error=(
        "Could not find a therms/usage column in this CSV. Make sure this is a gas (not electric) export."
    ),
    no_readings_error="No gas readings were parsed from this CSV.",
    skipped_warning="Skipped {count} row(s) that didn't look like gas interval readings.",
    interval_warning="Detected ~{size} hour intervals (expected 1 or 24). Data may be aggregated differently.",
)

NET_METERING_WARNING = (
    "Detected solar IMPORT/EXPORT columns. Calculating NET usage (Import - Export) to match utility billing."
)

MIN_ROWS = 2


def cell(row: list[str], index: int) -> str:
    """Cell text at index, or "" for short rows."""
    return row[index] if index < len(row) else ""


def _from_datetime_field(index: int, row: list[str]) -> datetime | None:
    return parse_datetime_field(cell(row, index))


def _from_date_and_time(date_index: int, time_index: int, row: list[str]) -> datetime | None:
    return parse_date_time(cell(row, date_index), cell(row, time_index))


def _shifted(resolver: TimestampResolver, offset: timedelta, row: list[str]) -> datetime | None:
    timestamp = resolver(row)
    if timestamp is None:
        return None
    try:
        return timestamp - offset
    except OverflowError:
        return None


def build_timestamp_resolvers(columns: ColumnMap, nominal_interval: timedelta) -> list[TimestampResolver]:
    """Ordered timestamp strategies for the columns present in this file.

    Interval-end strategies subtract one nominal interval so every reading is
    keyed by its interval start.
    """
    resolvers: list[TimestampResolver] = []

    if columns.start_datetime is not None:
        resolvers.append(partial(_from_datetime_field, columns.start_datetime))
    if columns.start_date is not None and columns.start_time is not None:
        resolvers.append(partial(_from_date_and_time, columns.start_date, columns.start_time))
    if columns.date is not None and columns.time is not None:
        resolvers.append(partial(_from_date_and_time, columns.date, columns.time))
    if columns.date is not None and columns.start_time is not None:
        resolvers.append(partial(_from_date_and_time, columns.date, columns.start_time))
    if columns.date is not None:
        # Some exports put the full timestamp in a single "Date" column
        resolvers.append(partial(_from_datetime_field, columns.date))
    if columns.end_datetime is not None:
        end = partial(_from_datetime_field, columns.end_datetime)
        resolvers.append(partial(_shifted, end, nominal_interval))
    if columns.end_date is not None and columns.end_time is not None:
        end = partial(_from_date_and_time, columns.end_date, columns.end_time)
        resolvers.append(partial(_shifted, end, nominal_interval))

    return resolvers


def resolve_timestamp(row: list[str], resolvers: list[TimestampResolver]) -> datetime | None:
    """First timestamp any strategy can produce for this row."""
    for resolver in resolvers:
        timestamp = resolver(row)
        if timestamp is not None:
            return timestamp
    return None


def resolve_usage(row: list[str], columns: ColumnMap) -> float | None:
    """Usage value for a row; import minus export when net metering.

    A blank import or export cell counts as zero in net metering mode.
    """
    if columns.net_metering:
        imported = parse_number(cell(row, columns.import_usage)) or 0.0
        exported = parse_number(cell(row, columns.export_usage)) or 0.0
        return imported - exported
    return parse_number(cell(row, columns.usage))


def build_readings(
    rows: list[list[str]], columns: ColumnMap, resolvers: list[TimestampResolver]
) -> tuple[list[Reading], int]:
    """Build readings from data rows. Returns (readings, skipped row count)."""
    readings = []
    skipped = 0

    for row in rows:
        value = resolve_usage(row, columns)
        if value is None:
            skipped += 1
            continue

        timestamp = resolve_timestamp(row, resolvers)
        if timestamp is None:
            skipped += 1
            continue

        readings.append(Reading(timestamp=timestamp, value=value))

    return readings, skipped


def merge_duplicate_timestamps(readings: list[Reading]) -> list[Reading]:
    """Sort by timestamp and sum readings that share one (DST repeats, export artifacts)."""
    totals: dict[datetime, float] = {}
    for reading in sorted(readings, key=lambda r: r.timestamp):
        totals[reading.timestamp] = totals.get(reading.timestamp, 0.0) + reading.value

    return [Reading(timestamp=ts, value=value) for ts, value in sorted(totals.items())]


def detect_interval_size(readings: list[Reading], unit: timedelta, sample_size: int) -> int | None:
    """Median spacing of the first sample_size readings, rounded to whole units.

    Returns None for fewer than 3 readings.
    """
    if len(readings) < 3:
        return None

    sample = readings[:sample_size]
    deltas = sorted(b.timestamp - a.timestamp for a, b in zip(sample, sample[1:]))
    median = deltas[len(deltas) // 2]
    return round(median / unit)


def normalize_readings(readings: list[Reading], skipped: int, profile: MeterProfile) -> ParseResult:
    """Sort and merge readings, collecting skip and interval-size warnings."""
    normalized = merge_duplicate_timestamps(readings)
    warnings = []

    if skipped > 0:
        warnings.append(profile.skipped_warning.format(count=skipped))

    size = detect_interval_size(normalized, profile.interval_unit, profile.interval_sample_size)
    if size is not None and size not in profile.expected_intervals:
        warnings.append(profile.interval_warning.format(size=size))

    return ParseResult(readings=normalized, warnings=warnings, skipped=skipped)


def parse_interval_csv(csv_text: str, profile: MeterProfile) -> ParseResult:
    """Parse a Green Button interval export into normalized readings.

    Raises GreenButtonParseError for empty input, an undetectable header, a
    missing usage column, or when no row yields a reading.
    """
    rows = parse_csv_rows(csv_text)
    if len(rows) < MIN_ROWS:
        raise GreenButtonParseError("CSV appears empty or unreadable.")

    header_index = detect_header_row(rows, profile.unit_keyword, profile.min_header_score)
    if header_index is None:
        raise GreenButtonParseError(profile.header_error)

    headers = [normalize_header(h) for h in rows[header_index]]
    columns = resolve_columns(
        headers,
        profile.unit_keyword,
        usage_pattern=profile.usage_pattern,
        net_metering=profile.net_metering,
    )
    if columns.usage is None:
        raise GreenButtonParseError(profile.usage_column_error)

    warnings = []
    if columns.net_metering:
        logger.info("Import/export columns found, using net usage")
        warnings.append(NET_METERING_WARNING)

    resolvers = build_timestamp_resolvers(columns, profile.nominal_interval)
    readings, skipped = build_readings(rows[header_index + 1 :], columns, resolvers)
    if not readings:
        raise GreenButtonParseError(profile.no_readings_error)

    result = normalize_readings(readings, skipped, profile)
    result.warnings = warnings + result.warnings
    logger.info(
        "Parsed %d readings (%d rows skipped, %d warnings)",
        len(result.readings),
        skipped,
        len(result.warnings),
    )
    return result


def parse_electricity_csv(csv_text: str) -> ParseResult:
    """Parse an electricity (kWh) interval export."""
    return parse_interval_csv(csv_text, ELECTRICITY)


def parse_gas_csv(csv_text: str) -> ParseResult:
    """Parse a gas (therm) interval export."""
    return parse_interval_csv(csv_text, GAS)
