"""
FedEx Data

Reference data for rates and zones.

Structure:
    - reference/: Static reference data (rate sheet CSV, zone bands)
"""

from shared.rates import read_rate_rows

from .reference import REFERENCE_DIR, ZONE_BANDS, FAR_ZONE, ZONES


def load_rate_rows() -> list[list[str]]:
    """Load the FedEx negotiated rate sheet as raw rows."""
    return read_rate_rows(REFERENCE_DIR / "base_rates.csv")


__all__ = [
    "load_rate_rows",
    "REFERENCE_DIR",
    "ZONE_BANDS",
    "FAR_ZONE",
    "ZONES",
]
