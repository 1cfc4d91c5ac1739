"""USPS reference data: rate notice and zone configuration."""

from pathlib import Path

from carriers.usps.data.reference.zone_bands import (
    ZONE_BANDS,
    FAR_ZONE,
    ZONES,
    ZONE_FALLBACKS,
)

REFERENCE_DIR = Path(__file__).parent

__all__ = [
    "REFERENCE_DIR",
    "ZONE_BANDS",
    "FAR_ZONE",
    "ZONES",
    "ZONE_FALLBACKS",
]
