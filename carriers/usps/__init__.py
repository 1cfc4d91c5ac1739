"""
USPS

Ground Advantage rate notice and zone estimation.

Usage:
    from carriers.usps import USPS
    table = USPS.parse_rate_table(USPS.load_rate_rows())
"""

from shared.carrier import Carrier, Rows
from shared.rates import RateTable

from .data import load_rate_rows, ZONE_BANDS, FAR_ZONE, ZONES, ZONE_FALLBACKS
from .rate_sheet import parse_brackets


class USPS(Carrier):
    """
    USPS Ground Advantage.

    Rate notice zones are fixed columns (1-9). Zone 9 falls back to zone 8
    when the notice leaves it blank.
    """

    name = "USPS"
    match_token = "usps"

    zones = ZONES
    zone_bands = ZONE_BANDS
    far_zone = FAR_ZONE
    zone_fallbacks = ZONE_FALLBACKS

    @classmethod
    def parse_rate_table(cls, rows: Rows) -> RateTable:
        return cls.build_table(parse_brackets(rows, cls.name))

    @classmethod
    def load_rate_rows(cls) -> list[list[str]]:
        return load_rate_rows()


__all__ = ["USPS"]
