"""
UPS

UPS Ground negotiated rate sheet and zone estimation.
"""

from shared.carrier import ZoneHeaderCarrier

from .data import load_rate_rows, ZONE_BANDS, FAR_ZONE, ZONES


class UPS(ZoneHeaderCarrier):
    """UPS Ground. Same sheet layout and distance bands as FedEx."""

    name = "UPS"
    match_token = "ups"

    zones = ZONES
    zone_bands = ZONE_BANDS
    far_zone = FAR_ZONE

    @classmethod
    def load_rate_rows(cls) -> list[list[str]]:
        return load_rate_rows()


__all__ = ["UPS"]
