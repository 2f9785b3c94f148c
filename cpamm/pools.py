"""Pool listing: describe every pair of a factory for display and search."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

import structlog

from cpamm.errors import AMMError
from cpamm.factory import Factory
from cpamm.ledger import FungibleLedger
from cpamm.pair import Pair
from cpamm.units import format_units

logger = structlog.get_logger()


@dataclass(frozen=True)
class TokenInfo:
    address: str
    symbol: str
    decimals: int


@dataclass(frozen=True)
class PoolInfo:
    """One pair with its token metadata and human-readable reserves."""

    pair_address: str
    token0: TokenInfo
    token1: TokenInfo
    reserve0: int
    reserve1: int
    total_supply: int

    @property
    def reserves(self) -> tuple[Decimal, Decimal]:
        """Reserves in whole-token units."""
        return (
            format_units(self.reserve0, self.token0.decimals),
            format_units(self.reserve1, self.token1.decimals),
        )

    @property
    def liquidity(self) -> Decimal:
        """Rough size of the pool used for ordering: sum of both reserves in whole tokens."""
        reserve0, reserve1 = self.reserves
        return reserve0 + reserve1

    def matches(self, term: str) -> bool:
        """Case-insensitive match of `term` against token symbols or addresses."""
        needle = term.lower()
        return any(
            needle in field.lower()
            for field in (
                self.token0.symbol,
                self.token1.symbol,
                self.token0.address,
                self.token1.address,
            )
        )


def describe_token(factory: Factory, address: str) -> TokenInfo:
    """Token metadata, with fallbacks for tokens that expose none."""
    contract = factory.chain.contract_at(address)
    if isinstance(contract, FungibleLedger):
        return TokenInfo(address=address, symbol=contract.symbol, decimals=contract.decimals)
    return TokenInfo(address=address, symbol=address[:10], decimals=18)


def describe_pool(factory: Factory, pair: Pair) -> PoolInfo:
    reserve0, reserve1, _ = pair.get_reserves()
    return PoolInfo(
        pair_address=pair.address,
        token0=describe_token(factory, pair.token0),
        token1=describe_token(factory, pair.token1),
        reserve0=reserve0,
        reserve1=reserve1,
        total_supply=pair.total_supply,
    )


def list_pools(factory: Factory, filter_term: str = "") -> list[PoolInfo]:
    """All pools of a factory, largest first, optionally filtered.

    A pair that cannot be described is logged and skipped rather than
    failing the whole listing.
    """
    pools: list[PoolInfo] = []
    for index in range(factory.all_pairs_length()):
        address = factory.all_pairs(index)
        contract = factory.chain.contract_at(address)
        if not isinstance(contract, Pair):
            logger.warning("pool_listing_missing_pair", index=index, pair=address)
            continue
        try:
            pools.append(describe_pool(factory, contract))
        except (AMMError, ArithmeticError) as err:
            logger.warning("pool_listing_skipped", index=index, pair=address, error=str(err))

    pools.sort(key=lambda pool: pool.liquidity, reverse=True)
    if filter_term:
        pools = [pool for pool in pools if pool.matches(filter_term)]
    return pools


__all__ = ["PoolInfo", "TokenInfo", "describe_pool", "describe_token", "list_pools"]
