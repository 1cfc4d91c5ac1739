"""
Column Schema Definitions

Documents the shipment fields read by the savings calculator and the
columns added at each pipeline stage.
"""


# =============================================================================
# REQUIRED INPUT FIELDS (exact, case-sensitive names)
# =============================================================================

CARRIER = "CARRIER"                                  # Free-text carrier name
ORIGIN_ZIP = "ORIGIN_ZIP"                            # Origin ZIP code
DESTINATION_ZIP = "DESTINATION_ZIP"                  # Destination ZIP code
WEIGHT_GRAMS = "PKG_WEIGHT_IN_GRAMS"                 # Declared weight (grams)
RATE_SHOPPER_CURRENCY = "TOTAL_LABEL_RATE_SHOPPER_CURRENCY"  # Preferred current rate
RATE_USD = "TOTAL_LABEL_RATE_USD"                    # Fallback current rate

REQUIRED_INPUT_COLS = [
    CARRIER,
    ORIGIN_ZIP,
    DESTINATION_ZIP,
]

OPTIONAL_INPUT_COLS = [
    WEIGHT_GRAMS,
    RATE_SHOPPER_CURRENCY,
    RATE_USD,
    "zone",                 # Zone already resolved by a zone service
]


# =============================================================================
# SUPPLEMENT COLUMNS (added by supplement_shipments)
# =============================================================================

SUPPLEMENT_COLS = [
    "carrier_family",       # Matched carrier ("USPS", "FedEx", "UPS") or null
    "weight_lbs",           # PKG_WEIGHT_IN_GRAMS / 453.592 (null if unparsable)
    "current_rate",         # Shopper currency rate, else USD rate, else 0
    "estimated_zone",       # Zone from ZIP prefix distance bands
    "zone",                 # Provided zone if present, else estimated_zone
    "rate_zone",            # Normalized zone key used for rate lookup
]


# =============================================================================
# CALCULATE COLUMNS (added by calculate)
# =============================================================================

SAVINGS_COLS = [
    "bracket_weight_lbs",   # Max weight of the selected rate bracket
    "negotiated_rate",      # Rate from the carrier's table (0 if none)
    "savings",              # current_rate - negotiated_rate
    "is_loop",              # savings > 0
]

METADATA_COLS = [
    "calculator_version",   # Version stamp from savings/version.py
]


# =============================================================================
# COLUMN SETS
# =============================================================================

AFTER_SUPPLEMENT = REQUIRED_INPUT_COLS + SUPPLEMENT_COLS

AFTER_CALCULATE = (
    REQUIRED_INPUT_COLS +
    SUPPLEMENT_COLS +
    SAVINGS_COLS +
    METADATA_COLS
)
