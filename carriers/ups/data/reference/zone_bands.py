"""
UPS Zone Configuration

UPS Ground zones are estimated with the same distance bands as FedEx.
Bounds are inclusive.
"""

from carriers.fedex.data.reference.zone_bands import ZONE_BANDS, FAR_ZONE

# Zone labels accepted in the rate sheet header
ZONES = frozenset("123456789")

__all__ = ["ZONE_BANDS", "FAR_ZONE", "ZONES"]
