"""Tests for header detection and column resolution."""

from ratecompare.collectors.headers import (
    INTERVAL_BOUNDARY_SCORE,
    MAX_HEADER_SCAN_ROWS,
    TEMPORAL_SCORE,
    UNIT_KEYWORD_SCORE,
    USAGE_NOUN_SCORE,
    detect_header_row,
    normalize_header,
    resolve_columns,
    score_header_row,
)

PREAMBLE = [
    ["Name", "JANE DOE"],
    ["Address", "1 MAIN ST, SAN FRANCISCO CA"],
    ["Account Number", "1234567890", "Service 1"],
]
HEADER = ["TYPE", "DATE", "START TIME", "END TIME", "USAGE (kWh)", "COST", "NOTES"]
DATA = ["Electric usage", "2025-01-18", "00:00", "00:14", "0.25", "$0.10", ""]


def test_normalize_header():
    assert normalize_header("  Usage (kWh) ") == "usage kwh"
    assert normalize_header("Start   Date") == "start date"
    assert normalize_header("IMPORT [kWh]") == "import kwh"


class TestScoreHeaderRow:
    def test_each_keyword_group_scores(self):
        assert score_header_row(["kWh", "x", "y"], "kwh") == UNIT_KEYWORD_SCORE
        assert score_header_row(["Consumption", "x", "y"], "kwh") == USAGE_NOUN_SCORE
        assert score_header_row(["Interval", "x", "y"], "kwh") == INTERVAL_BOUNDARY_SCORE
        assert score_header_row(["Date", "x", "y"], "kwh") == TEMPORAL_SCORE

    def test_full_header(self):
        score = score_header_row(["Start Date", "Start Time", "Usage (kWh)"], "kwh")
        assert score == UNIT_KEYWORD_SCORE + USAGE_NOUN_SCORE + INTERVAL_BOUNDARY_SCORE + TEMPORAL_SCORE

    def test_metadata_row_scores_zero(self):
        assert score_header_row(["Name", "Account", "Address"], "kwh") == 0


class TestDetectHeaderRow:
    def test_skips_metadata_preamble(self):
        rows = PREAMBLE + [HEADER, DATA]
        assert detect_header_row(rows, "kwh", 4) == 3

    def test_below_threshold(self):
        rows = [["Date", "Time", "Amount"], ["2025-01-18", "00:00", "1"]]
        assert detect_header_row(rows, "kwh", 4) is None

    def test_gas_threshold_is_lower(self):
        rows = [["Meter", "Therms", "Notes"], ["A", "1.0", ""]]
        assert detect_header_row(rows, "therm", 3) == 0
        assert detect_header_row(rows, "therm", 4) is None

    def test_rows_with_few_cells_are_ignored(self):
        rows = [["Usage kWh start date", ""], ["x", "y"]]
        assert detect_header_row(rows, "kwh", 4) is None

    def test_only_scans_leading_rows(self):
        rows = [["meta", "data", "row"]] * MAX_HEADER_SCAN_ROWS + [HEADER, DATA]
        assert detect_header_row(rows, "kwh", 4) is None

    def test_tie_keeps_first_row(self):
        rows = [HEADER, HEADER, DATA]
        assert detect_header_row(rows, "kwh", 4) == 0


class TestResolveColumns:
    def test_start_date_and_time(self):
        columns = resolve_columns(["start date", "start time", "usage kwh"], "kwh")
        assert columns.start_date == 0
        assert columns.start_time == 1
        assert columns.usage == 2
        assert columns.start_datetime is None
        assert not columns.net_metering

    def test_pge_layout(self):
        headers = [normalize_header(h) for h in HEADER]
        columns = resolve_columns(headers, "kwh")
        assert columns.date == 1
        assert columns.start_time == 2
        assert columns.end_time == 3
        assert columns.usage == 4

    def test_import_export_pair(self):
        headers = ["date", "start time", "import kwh", "export kwh"]
        columns = resolve_columns(headers, "kwh", net_metering=True)
        assert columns.net_metering
        assert columns.import_usage == 2
        assert columns.export_usage == 3
        assert columns.usage == 2

    def test_import_export_ignored_without_net_metering(self):
        headers = ["date", "start time", "import kwh", "export kwh"]
        columns = resolve_columns(headers, "kwh")
        assert not columns.net_metering
        assert columns.usage == 2

    def test_import_alone_is_not_net_metering(self):
        columns = resolve_columns(["date", "import kwh", "usage kwh"], "kwh", net_metering=True)
        assert not columns.net_metering
        assert columns.import_usage is None
        assert columns.usage == 2

    def test_usage_noun_preferred(self):
        columns = resolve_columns(["date", "rate kwh", "usage kwh"], "kwh")
        assert columns.usage == 2

    def test_money_columns_are_not_usage(self):
        columns = resolve_columns(["date", "time", "cost per kwh", "kwh"], "kwh")
        assert columns.usage == 3

    def test_no_usage_column(self):
        columns = resolve_columns(["start date", "start time", "usage", "value"], "kwh")
        assert columns.usage is None

    def test_combined_datetime_columns(self):
        columns = resolve_columns(["interval start", "interval end", "kwh"], "kwh")
        assert columns.start_datetime == 0
        assert columns.end_datetime == 1
        assert columns.usage == 2

    def test_generic_date_and_time(self):
        columns = resolve_columns(["date", "time", "usage kwh"], "kwh")
        assert columns.date == 0
        assert columns.time == 1
