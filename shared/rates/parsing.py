"""
Rate Cell Parsing

Helpers that turn raw spreadsheet cells into numbers and zone keys. Carrier
rate sheets arrive as exported CSVs with currency symbols, thousands
separators, unit suffixes and blank cells, so every loader goes through these.

CELL RULES
----------
    rates   - "$", "," and whitespace are stripped, then the leading number
              is parsed. Empty or unparsable cells are 0.0 (not missing).
    weights - digits and dots are kept. Values marked "oz" are converted to
              pounds and rounded to WEIGHT_DECIMALS. Unmarked values are lbs.
    zones   - "Zone 4", "04" and "4" all become "4". Anything else is kept
              as-is (stripped) so a bad label can be reported.
"""

import re
from pathlib import Path
from typing import Any, Sequence

import polars as pl

from .units import OUNCES_PER_POUND, WEIGHT_DECIMALS


# =============================================================================
# PATTERNS
# =============================================================================

# Leading number of a cell, mirrors how spreadsheet exports are read back
LEADING_NUMBER = r"^\s*([+-]?(?:\d+\.?\d*|\.\d+))"
LEADING_INTEGER = r"^\s*(\d+)"

RATE_NOISE = r"[$,\s]"
ZONE_LABEL = r"(?i)^(?:zone\s*)?0*(\d+)$"

_LEADING_NUMBER_RE = re.compile(LEADING_NUMBER)
_RATE_NOISE_RE = re.compile(RATE_NOISE)
_ZONE_LABEL_RE = re.compile(ZONE_LABEL)
_WEIGHT_NOISE_RE = re.compile(r"[^\d.]")


# =============================================================================
# CELLS
# =============================================================================

def cell_text(row: Sequence[Any], index: int) -> str:
    """Cell at index as a string, "" when the row is short or the cell is empty."""
    if index >= len(row) or row[index] is None:
        return ""
    return str(row[index])


def parse_number(value: Any) -> float | None:
    """Leading number of a value, or None when there is none."""
    if value is None:
        return None
    match = _LEADING_NUMBER_RE.match(str(value))
    if not match:
        return None
    return float(match.group(1))


def sanitize_rate(value: Any) -> str:
    """Strip currency symbols, thousands separators and whitespace."""
    if value is None or str(value) == "":
        return "0"
    return _RATE_NOISE_RE.sub("", str(value))


def parse_rate(value: Any) -> float:
    """Sanitized rate cell as a float. Blank or unparsable cells are 0.0."""
    rate = parse_number(sanitize_rate(value))
    return 0.0 if rate is None else rate


def parse_weight(value: Any) -> float | None:
    """
    Weight cell in pounds.

    Returns None when the cell has no digits (section labels, blanks) or
    the digits do not form a number.
    """
    text = "" if value is None else str(value)
    digits = _WEIGHT_NOISE_RE.sub("", text)
    if not digits:
        return None

    try:
        weight = float(digits)
    except ValueError:
        return None

    if "oz" in text.lower():
        return round(weight / OUNCES_PER_POUND, WEIGHT_DECIMALS)
    return weight


def normalize_zone(label: Any) -> str:
    """Canonical zone key ("Zone 04" -> "4"). Unrecognized labels come back stripped."""
    text = "" if label is None else str(label).strip()
    match = _ZONE_LABEL_RE.match(text)
    return match.group(1) if match else text


# =============================================================================
# RAW ROWS
# =============================================================================

def read_rate_rows(path: Path) -> list[list[str]]:
    """
    Read a raw rate sheet export as rows of string cells.

    No header row is assumed and no types are inferred. Empty cells come
    back as "" and rows with no content at all are dropped.
    """
    df = pl.read_csv(path, has_header=False, infer_schema_length=0)

    rows = [
        ["" if value is None else value for value in row]
        for row in df.rows()
    ]
    return [row for row in rows if any(cell.strip() for cell in row)]


__all__ = [
    "LEADING_NUMBER",
    "LEADING_INTEGER",
    "RATE_NOISE",
    "ZONE_LABEL",
    "cell_text",
    "parse_number",
    "sanitize_rate",
    "parse_rate",
    "parse_weight",
    "normalize_zone",
    "read_rate_rows",
]
