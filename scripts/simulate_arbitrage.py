#!/usr/bin/env python3
"""Simulate a triangular arbitrage across three constant-product pools.

Deploys a fresh factory and router, seeds three pools:
    A/B at 1:1, B/C at 1:2, A/C at 1:3 (mispriced against the other two)
and routes a trade A -> C -> B -> A through the router, reporting the
trader's net gain in A.

Usage:
    python scripts/simulate_arbitrage.py
    python scripts/simulate_arbitrage.py --amount-in 25 --liquidity 5000 -v
"""

import argparse
import logging
import sys
from decimal import Decimal
from pathlib import Path

import structlog

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from cpamm import ERC20, Chain, deploy  # noqa: E402
from cpamm.config import AMMConfig  # noqa: E402
from cpamm.constants import INFINITE_ALLOWANCE  # noqa: E402
from cpamm.errors import AMMError  # noqa: E402
from cpamm.units import format_units, parse_units  # noqa: E402

logger = structlog.get_logger()


def run_scenario(amount_in: str, liquidity: str, config: AMMConfig) -> tuple[int, int]:
    """Seed the three pools and run one loop of the arbitrage.

    Returns:
        (starting A balance, final A balance) of the trader, in base units
    """
    deployment = deploy(Chain(), config=config)
    chain, router = deployment.chain, deployment.router
    trader = chain.new_address("trader")

    token_a = ERC20(chain, "Token A", "A")
    token_b = ERC20(chain, "Token B", "B")
    token_c = ERC20(chain, "Token C", "C")

    base = parse_units(liquidity, 18)
    seed = [
        (token_a, token_b, base, base),
        (token_b, token_c, base, 2 * base),
        (token_a, token_c, base, 3 * base),
    ]
    for token in (token_a, token_b, token_c):
        token.mint(trader, 10 * base)
        token.approve(trader, router.address, INFINITE_ALLOWANCE)
    for first, second, amount_first, amount_second in seed:
        router.add_liquidity(
            trader,
            first.address,
            second.address,
            amount_first,
            amount_second,
            0,
            0,
            trader,
            router.deadline(),
        )
        logger.info(
            "pool_seeded",
            pair=f"{first.symbol}/{second.symbol}",
            reserves=(str(format_units(amount_first, 18)), str(format_units(amount_second, 18))),
        )

    start = token_a.balance_of(trader)
    path = [token_a.address, token_c.address, token_b.address, token_a.address]
    amounts = router.swap_exact_tokens_for_tokens(
        trader, parse_units(amount_in, 18), 0, path, trader, router.deadline()
    )
    logger.info("arbitrage_executed", amounts=[str(format_units(a, 18)) for a in amounts])
    return start, token_a.balance_of(trader)


def main() -> int:
    """Main entry point for the arbitrage simulation."""
    parser = argparse.ArgumentParser(
        description="Route A -> C -> B -> A through three mispriced constant-product pools",
    )
    parser.add_argument(
        "--amount-in",
        type=str,
        default="10",
        help="Amount of A to trade, in whole tokens (default: 10)",
    )
    parser.add_argument(
        "--liquidity",
        type=str,
        default="1000",
        help="Base liquidity per pool, in whole tokens (default: 1000)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )

    try:
        start, end = run_scenario(args.amount_in, args.liquidity, AMMConfig.from_env())
    except (AMMError, ValueError) as err:
        logger.error("simulation_failed", error=str(err))
        return 1

    profit = Decimal(end - start).scaleb(-18)
    print("=" * 60)
    print("Triangular arbitrage A -> C -> B -> A")
    print("=" * 60)
    print(f"Starting A balance: {format_units(start, 18)}")
    print(f"Final A balance:    {format_units(end, 18)}")
    print(f"Net profit:         {profit} A")
    return 0 if end > start else 2


if __name__ == "__main__":
    sys.exit(main())
