"""Header row detection and column role resolution.

Green Button exports prepend a variable-length block of account metadata
before the real header, so the header is found by scoring candidate rows
rather than by a fixed offset.
"""

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Header scoring weights
UNIT_KEYWORD_SCORE = 3
USAGE_NOUN_SCORE = 2
INTERVAL_BOUNDARY_SCORE = 2
TEMPORAL_SCORE = 1

MAX_HEADER_SCAN_ROWS = 80
MIN_HEADER_CELLS = 3

USAGE_NOUN_PATTERN = re.compile(r"usage|consumption|quantity|value")
INTERVAL_BOUNDARY_PATTERN = re.compile(r"start|end|interval")
TEMPORAL_PATTERN = re.compile(r"date|time")
MONEY_PATTERN = re.compile(r"cost|price|rate|charge|dollar|\$")

START_DATE_PATTERN = re.compile(r"start date|interval start date|usage start date|from date")
START_TIME_PATTERN = re.compile(r"start time|interval start time|usage start time|from time")
END_DATE_PATTERN = re.compile(r"end date|interval end date|usage end date|to date")
END_TIME_PATTERN = re.compile(r"end time|interval end time|usage end time|to time")
START_DATETIME_PATTERN = re.compile(r"interval start|start datetime|start date time")
END_DATETIME_PATTERN = re.compile(r"interval end|end datetime|end date time")
DATE_PATTERN = re.compile(r"reading date|usage date")
TIME_PATTERN = re.compile(r"reading time")


def normalize_header(value: str) -> str:
    """Lowercase, collapse whitespace and strip punctuation from a header cell."""
    text = re.sub(r"\s+", " ", value.strip().lower())
    text = re.sub(r"[()\[\]{}]", "", text)
    return re.sub(r"[^a-z0-9 ]", "", text)


def score_header_row(row: list[str], unit_keyword: str) -> int:
    """Score how much a row looks like the interval-data header."""
    joined = " | ".join(cell.lower() for cell in row)
    score = 0
    if unit_keyword in joined:
        score += UNIT_KEYWORD_SCORE
    if USAGE_NOUN_PATTERN.search(joined):
        score += USAGE_NOUN_SCORE
    if INTERVAL_BOUNDARY_PATTERN.search(joined):
        score += INTERVAL_BOUNDARY_SCORE
    if TEMPORAL_PATTERN.search(joined):
        score += TEMPORAL_SCORE
    return score


def detect_header_row(rows: list[list[str]], unit_keyword: str, min_score: int) -> int | None:
    """Return the index of the best-scoring header row, or None if none qualifies.

    Only the first MAX_HEADER_SCAN_ROWS rows with at least MIN_HEADER_CELLS
    non-empty cells are considered. Ties keep the earliest row.
    """
    best_index = None
    best_score = 0

    for index, row in enumerate(rows[:MAX_HEADER_SCAN_ROWS]):
        cells = [cell.strip() for cell in row]
        if sum(1 for cell in cells if cell) < MIN_HEADER_CELLS:
            continue

        score = score_header_row(cells, unit_keyword)
        if score > best_score:
            best_index = index
            best_score = score

    if best_score < min_score:
        logger.debug("Best header candidate scored %d (need %d)", best_score, min_score)
        return None

    logger.debug("Header row detected at index %d (score %d)", best_index, best_score)
    return best_index


@dataclass
class ColumnMap:
    """Column indexes for each semantic role. None means the role is absent."""

    usage: int | None = None
    import_usage: int | None = None
    export_usage: int | None = None
    start_datetime: int | None = None
    start_date: int | None = None
    start_time: int | None = None
    end_datetime: int | None = None
    end_date: int | None = None
    end_time: int | None = None
    date: int | None = None
    time: int | None = None

    @property
    def net_metering(self) -> bool:
        """True when separate import and export columns were found."""
        return self.import_usage is not None and self.export_usage is not None


def find_header(headers: list[str], predicate) -> int | None:
    """Index of the first header matching predicate."""
    for index, header in enumerate(headers):
        if predicate(header):
            return index
    return None


def resolve_usage_column(headers: list[str], unit_keyword: str, usage_pattern: re.Pattern) -> int | None:
    """Find the usage column: unit + usage noun, else any non-money unit column."""
    index = find_header(headers, lambda h: unit_keyword in h and usage_pattern.search(h) is not None)
    if index is not None:
        return index
    return find_header(headers, lambda h: unit_keyword in h and not MONEY_PATTERN.search(h))


def resolve_columns(
    headers: list[str],
    unit_keyword: str,
    usage_pattern: re.Pattern = USAGE_NOUN_PATTERN,
    net_metering: bool = False,
) -> ColumnMap:
    """Map normalized header names to semantic column roles.

    With net_metering enabled, paired import/export unit columns take
    priority and the import column doubles as the usage column.
    """
    columns = ColumnMap()

    if net_metering:
        columns.import_usage = find_header(headers, lambda h: "import" in h and unit_keyword in h)
        columns.export_usage = find_header(headers, lambda h: "export" in h and unit_keyword in h)
        if not columns.net_metering:
            columns.import_usage = None
            columns.export_usage = None

    if columns.net_metering:
        columns.usage = columns.import_usage
    else:
        columns.usage = resolve_usage_column(headers, unit_keyword, usage_pattern)

    columns.start_date = find_header(headers, START_DATE_PATTERN.search)
    columns.start_time = find_header(headers, START_TIME_PATTERN.search)
    columns.end_date = find_header(headers, END_DATE_PATTERN.search)
    columns.end_time = find_header(headers, END_TIME_PATTERN.search)
    columns.start_datetime = find_header(headers, START_DATETIME_PATTERN.search)
    columns.end_datetime = find_header(headers, END_DATETIME_PATTERN.search)
    columns.date = find_header(headers, lambda h: h == "date" or DATE_PATTERN.search(h) is not None)
    columns.time = find_header(headers, lambda h: h == "time" or TIME_PATTERN.search(h) is not None)

    logger.debug("Resolved columns: %s", columns)
    return columns
