"""Engine constants.

Centralizes the fee and price parameters shared by the math, swap and API
layers.
"""

# 0.3% trading fee retained in the pool: amount_in * 997 / 1000 is priced
FEE_NUMERATOR = 997
FEE_DENOMINATOR = 1000

# Prices are expressed as integers scaled by 1e18
PRICE_SCALE = 10**18

# Wildcard value for trade ledger filters
ZERO_ADDRESS = "0x" + "00" * 20

# Default account the engine holds pooled assets under
DEFAULT_ENGINE_ADDRESS = "0x" + "00" * 19 + "de"
