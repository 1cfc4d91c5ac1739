"""
USPS Rate Notice Parsing

Turns the published USPS rate notice into weight brackets.

SHEET LAYOUT
------------
The notice has a variable number of title rows before the first header, so
the header row is searched for rather than assumed:

    1. First row with "weight not over" (any case) in one of its first
       HEADER_SCAN_COLUMNS cells.
    2. Otherwise, the first row past FALLBACK_MIN_ROW with more than
       FALLBACK_MIN_CELLS cells and a unit marker ("oz"/"lb") in cell 0 or 1
       is taken as data; the row before it is the header and must also have
       more than FALLBACK_MIN_CELLS cells.

Every row after the header is data:

    cell 0      - label (usually empty)
    cell 1      - weight ("4 oz", "15.999 oz", "2")
    cells 2-10  - rates for zones 1-9

Rows with fewer than MIN_DATA_CELLS cells or no weight are skipped. That also
skips the second section header ("Weight Not Over (pounds)"), which has no
digits in its weight cell.
"""

from shared.rates import MalformedTableError, cell_text, parse_rate, parse_weight
from shared.carrier import Rows


HEADER_MARKER = "weight not over"
HEADER_SCAN_COLUMNS = 5

FALLBACK_MIN_ROW = 2
FALLBACK_MIN_CELLS = 8
UNIT_MARKERS = ("oz", "lb")

MIN_DATA_CELLS = 11
WEIGHT_COL = 1
ZONE_COLUMNS = {str(zone): zone + 1 for zone in range(1, 10)}


def find_header_row(rows: Rows) -> int | None:
    """Index of the header row, None if neither search finds one."""
    for idx, row in enumerate(rows):
        for col in range(min(len(row), HEADER_SCAN_COLUMNS)):
            if HEADER_MARKER in cell_text(row, col).lower():
                return idx

    return _find_header_by_units(rows)


def _find_header_by_units(rows: Rows) -> int | None:
    """Header is the row before the first row that looks like weight data."""
    for idx, row in enumerate(rows):
        if idx <= FALLBACK_MIN_ROW or len(row) <= FALLBACK_MIN_CELLS:
            continue

        leading = (cell_text(row, 0).lower(), cell_text(row, 1).lower())
        if any(marker in cell for cell in leading for marker in UNIT_MARKERS):
            if len(rows[idx - 1]) > FALLBACK_MIN_CELLS:
                return idx - 1
            return None

    return None


def parse_brackets(rows: Rows, carrier: str = "USPS") -> list[tuple[float, dict[str, float]]]:
    """
    Weight rows below the header, in sheet order.

    Raises:
        MalformedTableError: If no header row can be found
    """
    header_idx = find_header_row(rows)
    if header_idx is None:
        raise MalformedTableError(
            carrier, f"could not find rate data header, checked {len(rows)} rows"
        )

    brackets = []
    for row in rows[header_idx + 1:]:
        if len(row) < MIN_DATA_CELLS or not cell_text(row, WEIGHT_COL):
            continue

        weight_lbs = parse_weight(cell_text(row, WEIGHT_COL))
        if weight_lbs is None:
            continue

        zone_rates = {
            zone: parse_rate(cell_text(row, col_idx))
            for zone, col_idx in ZONE_COLUMNS.items()
        }
        brackets.append((weight_lbs, zone_rates))

    return brackets


__all__ = [
    "HEADER_MARKER",
    "MIN_DATA_CELLS",
    "ZONE_COLUMNS",
    "find_header_row",
    "parse_brackets",
]
