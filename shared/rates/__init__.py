"""
Shared Rates

Rate table structure, cell parsing and lookup used by every carrier.
"""

from .errors import MalformedTableError
from .parsing import (
    cell_text,
    parse_number,
    sanitize_rate,
    parse_rate,
    parse_weight,
    normalize_zone,
    read_rate_rows,
)
from .table import (
    RATE_FRAME_SCHEMA,
    WeightBracket,
    RateTable,
    lookup_rate,
    rate_frame,
)
from .units import GRAMS_PER_POUND, OUNCES_PER_POUND, WEIGHT_DECIMALS

__all__ = [
    # Errors
    "MalformedTableError",
    # Parsing
    "cell_text",
    "parse_number",
    "sanitize_rate",
    "parse_rate",
    "parse_weight",
    "normalize_zone",
    "read_rate_rows",
    # Table
    "RATE_FRAME_SCHEMA",
    "WeightBracket",
    "RateTable",
    "lookup_rate",
    "rate_frame",
    # Units
    "GRAMS_PER_POUND",
    "OUNCES_PER_POUND",
    "WEIGHT_DECIMALS",
]
