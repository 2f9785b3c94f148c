"""Protocol configuration for the AMM."""

from __future__ import annotations

import os
from dataclasses import dataclass

_TRUE_VALUES = ("true", "1", "yes")


@dataclass(frozen=True)
class AMMConfig:
    """Centralized configuration for pair and router math.

    Holding these as data instead of module constants keeps alternative fee
    schedules testable and guarantees the pair's invariant check and the
    router's quotes agree on the same fee.

    Attributes:
        fee_numerator: Share of the input that counts toward the invariant
            after the swap fee (997 for a 0.3% fee)
        fee_denominator: Scale of fee_numerator (1000)
        minimum_liquidity: LP units permanently locked at the zero address on
            the first deposit of every pair
        price_oracle_enabled: Maintain cumulative price accumulators on sync
        default_deadline_seconds: Deadline offset used by helpers that build
            transactions for a caller who did not supply one
    """

    fee_numerator: int = 997
    fee_denominator: int = 1000
    minimum_liquidity: int = 1000
    price_oracle_enabled: bool = True
    default_deadline_seconds: int = 20 * 60

    def __post_init__(self) -> None:
        if self.fee_denominator <= 0:
            raise ValueError(f"fee_denominator must be positive, got {self.fee_denominator}")
        if not 0 < self.fee_numerator <= self.fee_denominator:
            raise ValueError(
                f"fee_numerator must be in (0, {self.fee_denominator}], got {self.fee_numerator}"
            )
        if self.minimum_liquidity < 0:
            raise ValueError(f"minimum_liquidity cannot be negative: {self.minimum_liquidity}")
        if self.default_deadline_seconds < 0:
            raise ValueError(
                f"default_deadline_seconds cannot be negative: {self.default_deadline_seconds}"
            )

    @property
    def fee_bps(self) -> int:
        """Swap fee in basis points (30 = 0.3%)."""
        return (self.fee_denominator - self.fee_numerator) * 10_000 // self.fee_denominator

    @classmethod
    def from_env(cls) -> AMMConfig:
        """Build a config from CPAMM_* environment variables, falling back to defaults."""
        defaults = cls()
        return cls(
            fee_numerator=int(os.environ.get("CPAMM_FEE_NUMERATOR", defaults.fee_numerator)),
            fee_denominator=int(os.environ.get("CPAMM_FEE_DENOMINATOR", defaults.fee_denominator)),
            minimum_liquidity=int(
                os.environ.get("CPAMM_MINIMUM_LIQUIDITY", defaults.minimum_liquidity)
            ),
            price_oracle_enabled=os.environ.get(
                "CPAMM_PRICE_ORACLE", str(defaults.price_oracle_enabled)
            ).lower()
            in _TRUE_VALUES,
            default_deadline_seconds=int(
                os.environ.get("CPAMM_DEADLINE_SECONDS", defaults.default_deadline_seconds)
            ),
        )


# Default configuration instance
DEFAULT_CONFIG = AMMConfig()
