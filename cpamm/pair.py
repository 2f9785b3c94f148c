"""Constant-product pair: the reserve and invariant engine for one token pair.

The pair never trusts amounts passed in by a caller. Deposits are inferred by
comparing the pair's actual token balances with its cached reserves, so a
caller (usually the router) transfers tokens in first and calls mint / swap
afterwards. Reserves are only ever resynced from observed balances.

Swaps are optimistic: outputs are sent before payment is checked, and the
whole call is gated on the fee-adjusted constant-product check at the end.
Since every mutating call runs inside a chain transaction, a failed check
rolls the optimistic transfers back.
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any, ClassVar, Protocol, TypeVar, runtime_checkable

import structlog

from cpamm.chain import Chain
from cpamm.config import DEFAULT_CONFIG, AMMConfig
from cpamm.constants import LP_DECIMALS, LP_NAME, LP_SYMBOL, MAX_RESERVE, TIMESTAMP_MODULUS
from cpamm.errors import (
    AlreadyInitializedError,
    ForbiddenError,
    InsufficientInputAmountError,
    InsufficientLiquidityBurnedError,
    InsufficientLiquidityError,
    InsufficientLiquidityMintedError,
    InsufficientOutputAmountError,
    InvalidToError,
    InvariantViolationError,
    LockedError,
    ReserveOverflowError,
    TransferFailedError,
)
from cpamm.events import Burn, Mint, Swap, Sync
from cpamm.ledger import FungibleLedger
from cpamm.math import U, min_, sqrt
from cpamm.math.safe_uint import UINT256_MAX
from cpamm.math.uq112x112 import encode, uqdiv
from cpamm.models.types import ZERO_ADDRESS, normalize_address
from cpamm.token import Token

logger = structlog.get_logger()

F = TypeVar("F", bound=Callable[..., Any])


@runtime_checkable
class FlashSwapCallee(Protocol):
    """Contract that can receive a swap's output before paying for it."""

    address: str

    def on_flash_swap(self, sender: str, amount0: int, amount1: int, data: bytes) -> None: ...


def lock(method: F) -> F:
    """Reject reentrant calls into the same pair and run the call atomically."""

    @functools.wraps(method)
    def wrapper(self: Pair, *args: Any, **kwargs: Any) -> Any:
        if self._locked:
            raise LockedError(f"Reentrant {method.__name__} on pair {self.address}")
        self._locked = True
        try:
            with self.chain.transaction(method.__name__):
                return method(self, *args, **kwargs)
        finally:
            self._locked = False

    return wrapper  # type: ignore[return-value]


class Pair(FungibleLedger):
    """Reserves of token0/token1 plus the LP token ledger for them.

    Lifecycle: deployed and initialized once by the factory, then an
    arbitrary sequence of mint / burn / swap / skim / sync.
    """

    _state_fields: ClassVar[tuple[str, ...]] = FungibleLedger._state_fields + (
        "token0",
        "token1",
        "reserve0",
        "reserve1",
        "block_timestamp_last",
        "price0_cumulative_last",
        "price1_cumulative_last",
    )

    def __init__(
        self,
        chain: Chain,
        address: str,
        factory: str,
        config: AMMConfig = DEFAULT_CONFIG,
    ) -> None:
        self.factory = normalize_address(factory)
        self.config = config
        self.token0 = ZERO_ADDRESS
        self.token1 = ZERO_ADDRESS
        self.reserve0 = 0
        self.reserve1 = 0
        self.block_timestamp_last = 0
        self.price0_cumulative_last = 0
        self.price1_cumulative_last = 0
        self._locked = False
        super().__init__(chain, address, LP_NAME, LP_SYMBOL, LP_DECIMALS)

    @property
    def initialized(self) -> bool:
        return self.token0 != ZERO_ADDRESS

    def initialize(self, sender: str, token0: str, token1: str) -> None:
        """Bind the pair to its two tokens. Only the factory may call this, once."""
        if normalize_address(sender) != self.factory:
            raise ForbiddenError(f"Only factory {self.factory} can initialize")
        if self.initialized:
            raise AlreadyInitializedError(f"Pair {self.address} already initialized")
        self._touch()
        self.token0 = normalize_address(token0)
        self.token1 = normalize_address(token1)

    def get_reserves(self) -> tuple[int, int, int]:
        """Return (reserve0, reserve1, block_timestamp_last)."""
        return self.reserve0, self.reserve1, self.block_timestamp_last

    # --- Liquidity ---

    @lock
    def mint(self, to: str, *, sender: str = ZERO_ADDRESS) -> int:
        """Mint LP tokens for whatever was deposited since the last sync.

        Returns:
            Liquidity credited to `to`

        Raises:
            InsufficientLiquidityMintedError: If the deposit earns no liquidity
        """
        reserve0, reserve1, _ = self.get_reserves()
        balance0 = self._token(self.token0).balance_of(self.address)
        balance1 = self._token(self.token1).balance_of(self.address)
        amount0 = (U(balance0) - reserve0).value
        amount1 = (U(balance1) - reserve1).value

        minimum_liquidity = self.config.minimum_liquidity
        total_supply = self.total_supply
        if total_supply == 0:
            liquidity = sqrt(amount0 * amount1) - minimum_liquidity
        else:
            liquidity = min_(
                (U(amount0) * total_supply // reserve0).value,
                (U(amount1) * total_supply // reserve1).value,
            )
        if liquidity <= 0:
            raise InsufficientLiquidityMintedError(
                f"Deposit ({amount0}, {amount1}) earns no liquidity"
            )

        if total_supply == 0 and minimum_liquidity > 0:
            # Permanently lock the first MINIMUM_LIQUIDITY units
            self._mint(ZERO_ADDRESS, minimum_liquidity)
        self._mint(normalize_address(to), liquidity)

        self._update(balance0, balance1, reserve0, reserve1)
        self.emit(Mint, sender=sender, amount0=amount0, amount1=amount1)
        logger.debug(
            "pair_mint",
            pair=self.address,
            to=to,
            amount0=amount0,
            amount1=amount1,
            liquidity=liquidity,
        )
        return liquidity

    @lock
    def burn(self, to: str, *, sender: str = ZERO_ADDRESS) -> tuple[int, int]:
        """Burn the LP tokens held by the pair itself and pay out their share.

        The share is computed from current balances, not reserves, so any
        balance donated to the pair is distributed pro rata as well.

        Raises:
            InsufficientLiquidityBurnedError: If the pair has no supply or either
                payout rounds to zero
        """
        to = normalize_address(to)
        token0, token1 = self._token(self.token0), self._token(self.token1)
        balance0 = token0.balance_of(self.address)
        balance1 = token1.balance_of(self.address)
        liquidity = self.balance_of(self.address)

        total_supply = self.total_supply
        if total_supply == 0:
            raise InsufficientLiquidityBurnedError(f"Pair {self.address} has no liquidity")
        amount0 = (U(liquidity) * balance0 // total_supply).value
        amount1 = (U(liquidity) * balance1 // total_supply).value
        if amount0 == 0 or amount1 == 0:
            raise InsufficientLiquidityBurnedError(
                f"Burning {liquidity} of {total_supply} pays ({amount0}, {amount1})"
            )

        self._burn(self.address, liquidity)
        self._safe_transfer(token0, to, amount0)
        self._safe_transfer(token1, to, amount1)

        balance0 = token0.balance_of(self.address)
        balance1 = token1.balance_of(self.address)
        self._update(balance0, balance1, self.reserve0, self.reserve1)
        self.emit(Burn, sender=sender, amount0=amount0, amount1=amount1, to=to)
        logger.debug(
            "pair_burn",
            pair=self.address,
            to=to,
            liquidity=liquidity,
            amount0=amount0,
            amount1=amount1,
        )
        return amount0, amount1

    # --- Trading ---

    @lock
    def swap(
        self,
        amount0_out: int,
        amount1_out: int,
        to: str,
        data: bytes = b"",
        *,
        sender: str = ZERO_ADDRESS,
    ) -> None:
        """Send outputs to `to`, then require the invariant to hold net of fees.

        Input amounts are never passed in; they are whatever the balances
        grew by beyond (reserve - output). Passing non-empty `data` turns this
        into a flash swap: `to` is called back after receiving the outputs and
        must have repaid the pair by the time the callback returns.

        Raises:
            InsufficientOutputAmountError: If both outputs are zero
            InsufficientLiquidityError: If an output would drain its reserve
            InvalidToError: If `to` is one of the pair's tokens
            InsufficientInputAmountError: If nothing was paid in
            InvariantViolationError: If the fee-adjusted product decreased
        """
        if amount0_out <= 0 and amount1_out <= 0:
            raise InsufficientOutputAmountError()
        if amount0_out < 0 or amount1_out < 0:
            raise InsufficientOutputAmountError(f"Negative output: ({amount0_out}, {amount1_out})")
        reserve0, reserve1, _ = self.get_reserves()
        if amount0_out >= reserve0 or amount1_out >= reserve1:
            raise InsufficientLiquidityError(
                f"Outputs ({amount0_out}, {amount1_out}) exceed reserves ({reserve0}, {reserve1})"
            )

        to = normalize_address(to)
        if to in (self.token0, self.token1):
            raise InvalidToError(f"Swap recipient {to} is a pair token")

        token0, token1 = self._token(self.token0), self._token(self.token1)
        # Optimistic transfer
        if amount0_out > 0:
            self._safe_transfer(token0, to, amount0_out)
        if amount1_out > 0:
            self._safe_transfer(token1, to, amount1_out)
        if data:
            self._flash_callback(to, sender, amount0_out, amount1_out, data)

        balance0 = token0.balance_of(self.address)
        balance1 = token1.balance_of(self.address)
        amount0_in = U(balance0).saturating_sub(reserve0 - amount0_out).value
        amount1_in = U(balance1).saturating_sub(reserve1 - amount1_out).value
        if amount0_in == 0 and amount1_in == 0:
            raise InsufficientInputAmountError()

        fee_denominator = self.config.fee_denominator
        fee_cut = fee_denominator - self.config.fee_numerator
        balance0_adjusted = U(balance0) * fee_denominator - U(amount0_in) * fee_cut
        balance1_adjusted = U(balance1) * fee_denominator - U(amount1_in) * fee_cut
        if balance0_adjusted * balance1_adjusted < U(reserve0) * reserve1 * fee_denominator**2:
            raise InvariantViolationError(
                f"Product decreased: balances ({balance0}, {balance1}) "
                f"inputs ({amount0_in}, {amount1_in}) reserves ({reserve0}, {reserve1})"
            )

        self._update(balance0, balance1, reserve0, reserve1)
        self.emit(
            Swap,
            sender=sender,
            amount0_in=amount0_in,
            amount1_in=amount1_in,
            amount0_out=amount0_out,
            amount1_out=amount1_out,
            to=to,
        )
        logger.debug(
            "pair_swap",
            pair=self.address,
            amount0_in=amount0_in,
            amount1_in=amount1_in,
            amount0_out=amount0_out,
            amount1_out=amount1_out,
            to=to,
        )

    # --- Reserve maintenance ---

    @lock
    def skim(self, to: str) -> None:
        """Send any balance in excess of the reserves to `to`."""
        to = normalize_address(to)
        token0, token1 = self._token(self.token0), self._token(self.token1)
        self._safe_transfer(token0, to, token0.balance_of(self.address) - self.reserve0)
        self._safe_transfer(token1, to, token1.balance_of(self.address) - self.reserve1)

    @lock
    def sync(self) -> None:
        """Force reserves to match current balances."""
        self._update(
            self._token(self.token0).balance_of(self.address),
            self._token(self.token1).balance_of(self.address),
            self.reserve0,
            self.reserve1,
        )

    # --- Internals ---

    def _update(self, balance0: int, balance1: int, reserve0: int, reserve1: int) -> None:
        """Store new reserves and accumulate prices for the elapsed time.

        Prices accumulate at the old reserves, once per block: the first call
        in a block pays in the price that held since the previous block.
        """
        if balance0 > MAX_RESERVE or balance1 > MAX_RESERVE:
            raise ReserveOverflowError(f"Balances ({balance0}, {balance1}) exceed uint112")

        self._touch()
        block_timestamp = self.chain.timestamp % TIMESTAMP_MODULUS
        time_elapsed = (block_timestamp - self.block_timestamp_last) % TIMESTAMP_MODULUS
        if (
            self.config.price_oracle_enabled
            and time_elapsed > 0
            and reserve0 != 0
            and reserve1 != 0
        ):
            self.price0_cumulative_last = (
                self.price0_cumulative_last + uqdiv(encode(reserve1), reserve0) * time_elapsed
            ) & UINT256_MAX
            self.price1_cumulative_last = (
                self.price1_cumulative_last + uqdiv(encode(reserve0), reserve1) * time_elapsed
            ) & UINT256_MAX

        self.reserve0 = balance0
        self.reserve1 = balance1
        self.block_timestamp_last = block_timestamp
        self.emit(Sync, reserve0=balance0, reserve1=balance1)

    def _token(self, address: str) -> Token:
        contract = self.chain.contract_at(address)
        if not isinstance(contract, Token):
            raise TransferFailedError(f"No token contract at {address}")
        return contract

    def _safe_transfer(self, token: Token, to: str, amount: int) -> None:
        if not token.transfer(self.address, to, amount):
            raise TransferFailedError(f"Transfer of {amount} to {to} failed")

    def _flash_callback(
        self, to: str, sender: str, amount0: int, amount1: int, data: bytes
    ) -> None:
        callee = self.chain.contract_at(to)
        if not isinstance(callee, FlashSwapCallee):
            raise InvalidToError(f"Flash swap recipient {to} has no callback")
        callee.on_flash_swap(sender, amount0, amount1, data)


__all__ = ["FlashSwapCallee", "Pair", "lock"]