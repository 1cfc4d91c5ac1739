"""
Weight Units

Conversion constants shared by the rate table loaders and the savings
calculator. GRAMS_PER_POUND is the exact factor used for declared package
weights; results must match across runs bit for bit.
"""

GRAMS_PER_POUND = 453.592

# Ounce weights in rate tables are converted to pounds and rounded
OUNCES_PER_POUND = 16
WEIGHT_DECIMALS = 3
