"""
Zone-Header Rate Sheets

Rate sheet layout shared by FedEx and UPS exports:

    row 0   - preamble (title, effective date)
    row 1   - weight column label, then one zone label per column
    row 2.. - weight, then the rate for each zone column

Zone labels may be bare ("2") or prefixed ("Zone 2"). Data rows with no
weight are skipped. Empty rate cells are 0.0, so every bracket carries
every labelled zone.
"""

from shared.rates import MalformedTableError, RateTable, cell_text, parse_rate, parse_weight

from .base import Carrier, Rows


ZONE_HEADER_ROW = 1
FIRST_DATA_ROW = 2


class ZoneHeaderCarrier(Carrier):
    """Carrier whose rate sheet names its zones in a header row."""

    min_rows = 3

    @classmethod
    def parse_rate_table(cls, rows: Rows) -> RateTable:
        if len(rows) < cls.min_rows:
            raise MalformedTableError(
                cls.name, f"expected at least {cls.min_rows} rows, found {len(rows)}"
            )

        zone_columns = cls._zone_columns(rows[ZONE_HEADER_ROW])

        brackets = []
        for row in rows[FIRST_DATA_ROW:]:
            if len(row) < 2:
                continue
            weight_lbs = parse_weight(cell_text(row, 0))
            if weight_lbs is None:
                continue

            zone_rates = {
                zone: parse_rate(cell_text(row, col_idx))
                for col_idx, zone in zone_columns.items()
            }
            brackets.append((weight_lbs, zone_rates))

        return cls.build_table(brackets)

    @classmethod
    def _zone_columns(cls, header) -> dict[int, str]:
        """Column index -> zone key for every labelled column after the weight column."""
        zone_columns = {}
        for col_idx in range(1, len(header)):
            label = cell_text(header, col_idx).strip()
            if label:
                zone_columns[col_idx] = cls.zone_key(label)

        if not zone_columns:
            raise MalformedTableError(cls.name, "zone header row has no zone labels")
        return zone_columns
