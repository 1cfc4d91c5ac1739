"""
Savings

Shipping savings calculator: compares label rates paid with negotiated
carrier rates.

Usage:
    from savings import SavingsEngine

    engine = SavingsEngine.from_reference()
    results = engine.process_batch(records)
"""

from .calculate_savings import (
    ERROR_ZONE,
    SavingsResult,
    calculate_savings,
    calculate_savings_frame,
    supplement_shipments,
    calculate,
    summarize,
    summarize_results,
)
from .engine import SavingsEngine, ZoneSource
from .version import VERSION

__all__ = [
    "VERSION",
    "ERROR_ZONE",
    "SavingsResult",
    "SavingsEngine",
    "ZoneSource",
    "calculate_savings",
    "calculate_savings_frame",
    "supplement_shipments",
    "calculate",
    "summarize",
    "summarize_results",
]
