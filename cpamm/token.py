"""Token boundary used by the AMM core, plus a reference ERC20.

The pair and router only depend on the Token protocol. ERC20 is a plain
balance-mapping token that satisfies it; it carries no invariant logic.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import structlog

from cpamm.chain import Chain, transactional
from cpamm.ledger import FungibleLedger
from cpamm.models.types import normalize_address

logger = structlog.get_logger()


@runtime_checkable
class Token(Protocol):
    """Capability the AMM core needs from a token.

    The calling account (msg.sender) is always passed first. Mutating calls
    return True on success; a token may also raise to reject a call.
    """

    address: str

    def balance_of(self, account: str) -> int: ...

    def transfer(self, sender: str, to: str, amount: int) -> bool: ...

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool: ...

    def approve(self, owner: str, spender: str, amount: int) -> bool: ...


class ERC20(FungibleLedger):
    """Standard fungible token with an unrestricted faucet `mint`."""

    def __init__(
        self,
        chain: Chain,
        name: str,
        symbol: str,
        decimals: int = 18,
        address: str | None = None,
    ) -> None:
        super().__init__(
            chain,
            address if address is not None else chain.new_address(f"token:{symbol}"),
            name,
            symbol,
            decimals,
        )

    @transactional
    def mint(self, to: str, amount: int) -> None:
        """Create `amount` new tokens for `to`."""
        if amount < 0:
            raise ValueError(f"Mint amount cannot be negative: {amount}")
        self._mint(normalize_address(to), amount)
        logger.debug("token_minted", token=self.symbol, to=to, amount=amount)
