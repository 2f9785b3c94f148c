"""Protocol constants for the AMM.

Tunable economics (fee, minimum liquidity) live in cpamm.config; the values
here are fixed by the protocol's storage layout and address derivation.
"""

from eth_utils import keccak

from cpamm.math.safe_uint import UINT112_MAX, UINT256_MAX
from cpamm.models.types import ZERO_ADDRESS

# LP token metadata, shared by every pair
LP_NAME = "CPAMM Liquidity"
LP_SYMBOL = "CPAMM-LP"
LP_DECIMALS = 18

# Hash standing in for the pair's creation code in CREATE2 address derivation.
# Pair addresses are a pure function of (factory, token0, token1) and this hash.
PAIR_INIT_CODE_HASH = keccak(text="cpamm.pair.Pair:v1")

# Reserves are packed as uint112 and the oracle timestamp as uint32
MAX_RESERVE = UINT112_MAX
TIMESTAMP_MODULUS = 2**32

# Allowance value that is never decremented by transfer_from
INFINITE_ALLOWANCE = UINT256_MAX

__all__ = [
    "INFINITE_ALLOWANCE",
    "LP_DECIMALS",
    "LP_NAME",
    "LP_SYMBOL",
    "MAX_RESERVE",
    "PAIR_INIT_CODE_HASH",
    "TIMESTAMP_MODULUS",
    "ZERO_ADDRESS",
]
