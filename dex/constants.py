"""Protocol constants for the constant-product pool.

Centralizes fixed-point scaling and fee parameters.
"""

# Fixed-point scale for prices (1e18, matching 18-decimal token amounts)
PRICE_SCALE = 10**18

# Fee denominator in basis points (fee_multiplier / FEE_BASE of the input is priced)
FEE_BASE = 10_000

# Standard pool fee: 30 bps (0.3%), priced as 9970/10000 == 997/1000
DEFAULT_FEE_BPS = 30

# Largest amount the reference platform can store
UINT256_MAX = 2**256 - 1
