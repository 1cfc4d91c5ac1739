"""
USPS Data

Reference data for rates and zones.

Structure:
    - reference/: Static reference data (rate notice CSV, zone bands)
"""

from shared.rates import read_rate_rows

from .reference import (
    REFERENCE_DIR,
    ZONE_BANDS,
    FAR_ZONE,
    ZONES,
    ZONE_FALLBACKS,
)


def load_rate_rows() -> list[list[str]]:
    """
    Load the USPS rate notice as raw rows.

    The notice is kept in its published layout (title rows, an ounce section
    and a pound section, each with its own header row). Parsing happens in
    carriers.usps.rate_sheet.

    Returns:
        Rows of string cells, no header assumed
    """
    return read_rate_rows(REFERENCE_DIR / "base_rates.csv")


__all__ = [
    "load_rate_rows",
    "REFERENCE_DIR",
    "ZONE_BANDS",
    "FAR_ZONE",
    "ZONES",
    "ZONE_FALLBACKS",
]
