"""Tolerant CSV row tokenizer for utility export files.

Exports arrive with any mix of CRLF/CR/LF line endings, quoted cells that
contain commas or newlines, and doubled quotes inside quoted cells. Rows
whose cells are all blank are dropped. No header/value distinction is made
here; see headers.py for that.
"""

import csv
import io
import logging

logger = logging.getLogger(__name__)


def normalize_line_endings(text: str) -> str:
    """Convert CRLF and bare CR line endings to LF."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def is_blank_row(row: list[str]) -> bool:
    return not any(cell.strip() for cell in row)


def parse_csv_rows(csv_text: str) -> list[list[str]]:
    """Split raw CSV text into rows of string cells.

    Malformed quoting is read permissively (an unterminated quote runs to the
    end of the text). A csv.Error part way through ends tokenizing at that
    point and the rows read so far are returned.
    """
    rows = []
    reader = csv.reader(io.StringIO(normalize_line_endings(csv_text), newline=""), strict=False)
    try:
        for row in reader:
            if is_blank_row(row):
                continue
            rows.append(row)
    except csv.Error as e:
        logger.warning("Stopped reading CSV at line %d: %s", reader.line_num, e)

    return rows
