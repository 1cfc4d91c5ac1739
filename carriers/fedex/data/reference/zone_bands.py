"""
FedEx Zone Configuration

Distance bands for estimating FedEx Ground zones when no zone service is
available. Distance is the absolute difference of the 3-digit ZIP prefixes.
Bounds are inclusive.

Bands are wider than USPS: FedEx zones cover coarser distance steps.
"""

ZONE_BANDS = (
    (50, "2"),
    (150, "3"),
    (300, "4"),
    (600, "5"),
    (1000, "6"),
    (1400, "7"),
    (1800, "8"),
)
FAR_ZONE = "9"

# Zone labels accepted in the rate sheet header
ZONES = frozenset("123456789")
