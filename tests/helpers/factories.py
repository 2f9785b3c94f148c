"""Factory functions and test contracts.

Usage:
    from tests.helpers import fund, seed_pool
    # or
    from tests.helpers.factories import FlashBorrower, ReentrantToken

    fund(token, ALICE, router)
    seed_pool(router, ALICE, token_a, token_b, 1000 * E18, 1000 * E18)
"""

from typing import ClassVar

from cpamm.chain import Chain, Contract
from cpamm.constants import INFINITE_ALLOWANCE
from cpamm.pair import Pair
from cpamm.router import Router
from cpamm.token import ERC20
from tests.helpers.constants import INITIAL_BALANCE


def make_token(chain: Chain, symbol: str, decimals: int = 18) -> ERC20:
    """Deploy a plain ERC20 named after its symbol."""
    return ERC20(chain, f"Token {symbol}", symbol, decimals)


def fund(token: ERC20, account: str, router: Router, amount: int = INITIAL_BALANCE) -> None:
    """Mint `amount` to `account` and give the router an unlimited allowance."""
    token.mint(account, amount)
    token.approve(account, router.address, INFINITE_ALLOWANCE)


def seed_pool(
    router: Router,
    sender: str,
    token_a: ERC20,
    token_b: ERC20,
    amount_a: int,
    amount_b: int,
) -> tuple[int, int, int]:
    """Add liquidity through the router with no slippage limits.

    Returns:
        (amount_a, amount_b, liquidity) as reported by the router
    """
    return router.add_liquidity(
        sender,
        token_a.address,
        token_b.address,
        amount_a,
        amount_b,
        0,
        0,
        sender,
        router.deadline(),
    )


class FlashBorrower(Contract):
    """Flash swap recipient that pays the pair back from its own balance.

    Usage:
        borrower = FlashBorrower(chain, pair)
        token.mint(borrower.address, fee)
        borrower.repay = {token.address: amount_owed}
        pair.swap(amount0_out, 0, borrower.address, b"flash")
    """

    _state_fields: ClassVar[tuple[str, ...]] = ()

    def __init__(self, chain: Chain, pair: Pair) -> None:
        self.pair = pair
        self.repay: dict[str, int] = {}
        self.calls: list[tuple[str, int, int, bytes]] = []  # Track callbacks for assertions
        super().__init__(chain, chain.new_address("flash-borrower"))

    def on_flash_swap(self, sender: str, amount0: int, amount1: int, data: bytes) -> None:
        self.calls.append((sender, amount0, amount1, data))
        for token_address, amount in self.repay.items():
            token = self.chain.contract_at(token_address)
            assert isinstance(token, ERC20)
            token.transfer(self.address, self.pair.address, amount)


class ReentrantToken(ERC20):
    """Token that calls back into a pair whenever that pair sends it.

    Set `target` to a pair to arm it; every transfer out of the target pair
    then attempts `target.sync()` before the transfer completes.
    """

    def __init__(self, chain: Chain, symbol: str = "EVIL") -> None:
        super().__init__(chain, f"Token {symbol}", symbol)
        self.target: Pair | None = None

    def _on_transfer(self, sender: str, to: str, amount: int) -> None:
        if self.target is not None and sender == self.target.address:
            self.target.sync()
