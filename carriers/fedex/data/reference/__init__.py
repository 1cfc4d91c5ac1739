"""FedEx reference data: negotiated rate sheet and zone configuration."""

from pathlib import Path

from carriers.fedex.data.reference.zone_bands import ZONE_BANDS, FAR_ZONE, ZONES

REFERENCE_DIR = Path(__file__).parent

__all__ = [
    "REFERENCE_DIR",
    "ZONE_BANDS",
    "FAR_ZONE",
    "ZONES",
]
