"""Test helpers module for shared test utilities.

- constants: Accounts, amounts and the fixed block time
- factories: Token/pool builders and purpose-built test contracts
"""

from tests.helpers.constants import ALICE, BOB, CAROL, E18, INITIAL_BALANCE, START_TIMESTAMP
from tests.helpers.factories import (
    FlashBorrower,
    ReentrantToken,
    fund,
    make_token,
    seed_pool,
)

__all__ = [
    # Constants
    "ALICE",
    "BOB",
    "CAROL",
    "E18",
    "INITIAL_BALANCE",
    "START_TIMESTAMP",
    # Factories
    "FlashBorrower",
    "ReentrantToken",
    "fund",
    "make_token",
    "seed_pool",
]
