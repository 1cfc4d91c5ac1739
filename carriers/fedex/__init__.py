"""
FedEx

FedEx Ground negotiated rate sheet and zone estimation.

Usage:
    from carriers.fedex import FedEx
    table = FedEx.parse_rate_table(FedEx.load_rate_rows())
"""

from shared.carrier import ZoneHeaderCarrier

from .data import load_rate_rows, ZONE_BANDS, FAR_ZONE, ZONES


class FedEx(ZoneHeaderCarrier):
    """FedEx Ground. Zones come from the rate sheet header row."""

    name = "FedEx"
    match_token = "fedex"

    zones = ZONES
    zone_bands = ZONE_BANDS
    far_zone = FAR_ZONE

    @classmethod
    def load_rate_rows(cls) -> list[list[str]]:
        return load_rate_rows()


__all__ = ["FedEx"]
