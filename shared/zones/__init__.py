"""
Shared Zones

Distance-band zone estimation from ZIP codes.

When no authoritative zone source is available, the zone is approximated
from the numeric distance between the 3-digit ZIP prefixes of origin and
destination. Each carrier maps that distance onto its own ascending bands.

ESTIMATION
----------
    1. prefix   = leading integer of the first 3 characters of each ZIP
    2. distance = |origin prefix - destination prefix|
    3. zone     = first band whose upper bound (inclusive) >= distance,
                  otherwise the carrier's far zone

A ZIP without a numeric prefix has no distance and gets the far zone.
Estimation never raises.
"""

import re
from typing import Any, Sequence

from shared.rates.parsing import LEADING_INTEGER

_LEADING_INTEGER_RE = re.compile(LEADING_INTEGER)

ZIP_LENGTH = 5
PREFIX_LENGTH = 3


def zip_prefix(zip_code: Any) -> int | None:
    """Numeric 3-digit prefix of a ZIP code, or None."""
    if zip_code is None:
        return None
    if isinstance(zip_code, int):
        # Leading zeros are lost when ZIPs are stored as numbers
        zip_code = str(zip_code).zfill(ZIP_LENGTH)

    match = _LEADING_INTEGER_RE.match(str(zip_code)[:PREFIX_LENGTH])
    return int(match.group(1)) if match else None


def zip_distance(origin_zip: Any, destination_zip: Any) -> int | None:
    """Absolute difference between the ZIP prefixes, None if either is unusable."""
    origin = zip_prefix(origin_zip)
    destination = zip_prefix(destination_zip)
    if origin is None or destination is None:
        return None
    return abs(origin - destination)


def band_zone(distance: int | None, bands: Sequence[tuple[int, str]], far_zone: str) -> str:
    """
    Map a distance onto ascending (upper_bound, zone) bands.

    Args:
        distance: ZIP prefix distance (None when unknown)
        bands: (inclusive upper bound, zone) pairs, ascending
        far_zone: Zone beyond the last band

    Returns:
        Zone key
    """
    if distance is None:
        return far_zone

    for upper, zone in bands:
        if distance <= upper:
            return zone
    return far_zone


__all__ = [
    "ZIP_LENGTH",
    "PREFIX_LENGTH",
    "zip_prefix",
    "zip_distance",
    "band_zone",
]
