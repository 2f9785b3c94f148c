"""Router: liquidity and multi-hop swap orchestration over one factory.

The router holds no state of its own. Every entry point checks its deadline,
computes amounts with the library, moves the caller's tokens straight into
the pair(s) and calls the pair. Intermediate hop outputs are sent directly to
the next pair, so the router never custodies tokens.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from cpamm.chain import Chain, transactional
from cpamm.errors import (
    ExcessiveInputAmountError,
    ExpiredError,
    InsufficientAAmountError,
    InsufficientBAmountError,
    InsufficientOutputAmountError,
    InvalidPathError,
    TransferFailedError,
)
from cpamm.factory import Factory
from cpamm.library import ConstantProductMath, pair_for, sort_tokens
from cpamm.models.types import ZERO_ADDRESS, normalize_address
from cpamm.token import Token

logger = structlog.get_logger()


class Router:
    """Stateless orchestrator bound to one factory.

    The calling account is passed explicitly as `sender`. Callers must have
    approved the router to spend their tokens (and LP tokens, for removal).
    """

    def __init__(self, factory: Factory, address: str | None = None) -> None:
        self.factory = factory
        self.chain: Chain = factory.chain
        self.address = normalize_address(
            address if address is not None else self.chain.new_address("router")
        )
        self.math = ConstantProductMath(factory.config)

    def deadline(self, seconds: int | None = None) -> int:
        """A deadline `seconds` from now (config default when omitted)."""
        if seconds is None:
            seconds = self.factory.config.default_deadline_seconds
        return self.chain.timestamp + seconds

    # --- Liquidity ---

    def _add_liquidity(
        self,
        token_a: str,
        token_b: str,
        amount_a_desired: int,
        amount_b_desired: int,
        amount_a_min: int,
        amount_b_min: int,
    ) -> tuple[int, int]:
        """Pick deposit amounts that match the pool's current ratio.

        A fresh pool accepts the desired amounts as-is; they set the price.
        """
        if self.factory.get_pair(token_a, token_b) == ZERO_ADDRESS:
            self.factory.create_pair(token_a, token_b)
        reserve_a, reserve_b = self.math.get_reserves(self.factory, token_a, token_b)
        if reserve_a == 0 and reserve_b == 0:
            return amount_a_desired, amount_b_desired

        amount_b_optimal = self.math.quote(amount_a_desired, reserve_a, reserve_b)
        if amount_b_optimal <= amount_b_desired:
            if amount_b_optimal < amount_b_min:
                raise InsufficientBAmountError(
                    f"Optimal B {amount_b_optimal} below minimum {amount_b_min}"
                )
            return amount_a_desired, amount_b_optimal

        amount_a_optimal = self.math.quote(amount_b_desired, reserve_b, reserve_a)
        # amount_b_optimal > amount_b_desired implies this holds
        assert amount_a_optimal <= amount_a_desired
        if amount_a_optimal < amount_a_min:
            raise InsufficientAAmountError(
                f"Optimal A {amount_a_optimal} below minimum {amount_a_min}"
            )
        return amount_a_optimal, amount_b_desired

    @transactional
    def add_liquidity(
        self,
        sender: str,
        token_a: str,
        token_b: str,
        amount_a_desired: int,
        amount_b_desired: int,
        amount_a_min: int,
        amount_b_min: int,
        to: str,
        deadline: int,
    ) -> tuple[int, int, int]:
        """Deposit both tokens at the pool ratio and mint LP tokens to `to`.

        Returns:
            (amount_a, amount_b, liquidity)
        """
        self._ensure(deadline)
        amount_a, amount_b = self._add_liquidity(
            token_a, token_b, amount_a_desired, amount_b_desired, amount_a_min, amount_b_min
        )
        pair = self.math.pair(self.factory, token_a, token_b)
        self._transfer_from(token_a, sender, pair.address, amount_a)
        self._transfer_from(token_b, sender, pair.address, amount_b)
        liquidity = pair.mint(to, sender=self.address)
        logger.debug(
            "liquidity_added",
            pair=pair.address,
            sender=sender,
            amount_a=amount_a,
            amount_b=amount_b,
            liquidity=liquidity,
        )
        return amount_a, amount_b, liquidity

    @transactional
    def remove_liquidity(
        self,
        sender: str,
        token_a: str,
        token_b: str,
        liquidity: int,
        amount_a_min: int,
        amount_b_min: int,
        to: str,
        deadline: int,
    ) -> tuple[int, int]:
        """Return `liquidity` LP tokens to the pair and pay out both tokens.

        Returns:
            (amount_a, amount_b) in argument order
        """
        self._ensure(deadline)
        pair = self.math.pair(self.factory, token_a, token_b)
        if not pair.transfer_from(self.address, sender, pair.address, liquidity):
            raise TransferFailedError("LP token transfer failed")
        amount0, amount1 = pair.burn(to, sender=self.address)

        token0, _ = sort_tokens(token_a, token_b)
        if normalize_address(token_a) == token0:
            amount_a, amount_b = amount0, amount1
        else:
            amount_a, amount_b = amount1, amount0
        if amount_a < amount_a_min:
            raise InsufficientAAmountError(f"Received A {amount_a} below minimum {amount_a_min}")
        if amount_b < amount_b_min:
            raise InsufficientBAmountError(f"Received B {amount_b} below minimum {amount_b_min}")
        logger.debug(
            "liquidity_removed",
            pair=pair.address,
            sender=sender,
            liquidity=liquidity,
            amount_a=amount_a,
            amount_b=amount_b,
        )
        return amount_a, amount_b

    # --- Swaps ---

    def _swap(self, amounts: Sequence[int], path: Sequence[str], to: str) -> None:
        """Execute a swap chain whose first input is already in the first pair.

        Each hop's output goes straight to the next hop's pair; the last hop
        pays `to`.
        """
        for i, (token_in, token_out) in enumerate(zip(path, path[1:])):
            token0, _ = sort_tokens(token_in, token_out)
            amount_out = amounts[i + 1]
            if normalize_address(token_in) == token0:
                amount0_out, amount1_out = 0, amount_out
            else:
                amount0_out, amount1_out = amount_out, 0
            recipient = (
                pair_for(self.factory.address, token_out, path[i + 2])
                if i < len(path) - 2
                else to
            )
            pair = self.math.pair(self.factory, token_in, token_out)
            pair.swap(amount0_out, amount1_out, recipient, sender=self.address)

    @transactional
    def swap_exact_tokens_for_tokens(
        self,
        sender: str,
        amount_in: int,
        amount_out_min: int,
        path: Sequence[str],
        to: str,
        deadline: int,
    ) -> list[int]:
        """Sell exactly `amount_in` of path[0] for as much of path[-1] as possible.

        Returns:
            Amounts at every step of the path

        Raises:
            InsufficientOutputAmountError: If the final output is below amount_out_min
        """
        self._ensure(deadline)
        self._check_path(path)
        amounts = self.math.get_amounts_out(self.factory, amount_in, path)
        if amounts[-1] < amount_out_min:
            raise InsufficientOutputAmountError(
                f"Output {amounts[-1]} below minimum {amount_out_min}"
            )
        self._transfer_from(
            path[0], sender, pair_for(self.factory.address, path[0], path[1]), amounts[0]
        )
        self._swap(amounts, path, to)
        logger.debug(
            "swap_exact_in",
            sender=sender,
            hops=len(path) - 1,
            amount_in=amounts[0],
            amount_out=amounts[-1],
        )
        return amounts

    @transactional
    def swap_tokens_for_exact_tokens(
        self,
        sender: str,
        amount_out: int,
        amount_in_max: int,
        path: Sequence[str],
        to: str,
        deadline: int,
    ) -> list[int]:
        """Buy exactly `amount_out` of path[-1], paying at most `amount_in_max`.

        Raises:
            ExcessiveInputAmountError: If the required input exceeds amount_in_max
        """
        self._ensure(deadline)
        self._check_path(path)
        amounts = self.math.get_amounts_in(self.factory, amount_out, path)
        if amounts[0] > amount_in_max:
            raise ExcessiveInputAmountError(f"Input {amounts[0]} above maximum {amount_in_max}")
        self._transfer_from(
            path[0], sender, pair_for(self.factory.address, path[0], path[1]), amounts[0]
        )
        self._swap(amounts, path, to)
        logger.debug(
            "swap_exact_out",
            sender=sender,
            hops=len(path) - 1,
            amount_in=amounts[0],
            amount_out=amounts[-1],
        )
        return amounts

    # --- Library passthroughs ---

    def quote(self, amount_a: int, reserve_a: int, reserve_b: int) -> int:
        return self.math.quote(amount_a, reserve_a, reserve_b)

    def get_amount_out(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        return self.math.get_amount_out(amount_in, reserve_in, reserve_out)

    def get_amount_in(self, amount_out: int, reserve_in: int, reserve_out: int) -> int:
        return self.math.get_amount_in(amount_out, reserve_in, reserve_out)

    def get_amounts_out(self, amount_in: int, path: Sequence[str]) -> list[int]:
        return self.math.get_amounts_out(self.factory, amount_in, path)

    def get_amounts_in(self, amount_out: int, path: Sequence[str]) -> list[int]:
        return self.math.get_amounts_in(self.factory, amount_out, path)

    # --- Internals ---

    def _ensure(self, deadline: int) -> None:
        if deadline < self.chain.timestamp:
            raise ExpiredError(f"Deadline {deadline} before block time {self.chain.timestamp}")

    @staticmethod
    def _check_path(path: Sequence[str]) -> None:
        if len(path) < 2:
            raise InvalidPathError(f"Path needs at least 2 tokens, got {len(path)}")

    def _transfer_from(self, token_address: str, owner: str, to: str, amount: int) -> None:
        token = self.chain.contract_at(token_address)
        if not isinstance(token, Token) or not token.transfer_from(self.address, owner, to, amount):
            raise TransferFailedError(f"transfer_from of {amount} {token_address} failed")


__all__ = ["Router"]
