"""
USPS Zone Configuration

Distance bands for estimating USPS zones when no zone service is available.
Distance is the absolute difference of the 3-digit ZIP prefixes. Bounds are
inclusive.

USPS bands are the narrowest of all carriers: zone 9 starts past 600.
"""

ZONE_BANDS = (
    (50, "2"),
    (100, "3"),
    (200, "4"),
    (300, "5"),
    (400, "6"),
    (500, "7"),
    (600, "8"),
)
FAR_ZONE = "9"

# Zones 1-9 are fixed columns on the rate notice
ZONES = frozenset("123456789")

# Ground tier notices often leave zone 9 blank: use zone 8 in that bracket
ZONE_FALLBACKS = {"9": "8"}
