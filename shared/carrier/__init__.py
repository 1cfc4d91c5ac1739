"""
Shared Carrier

Base classes for carrier configuration and rate sheet parsing.
"""

from .base import Carrier, Rows
from .zone_header import ZoneHeaderCarrier

__all__ = [
    "Carrier",
    "Rows",
    "ZoneHeaderCarrier",
]
