"""Pytest configuration and fixtures."""

import pytest

from cpamm.chain import Chain
from cpamm.deployment import Deployment, deploy
from cpamm.factory import Factory
from cpamm.pair import Pair
from cpamm.router import Router
from cpamm.token import ERC20
from tests.helpers import ALICE, BOB, START_TIMESTAMP, fund, make_token

# =============================================================================
# Chain and deployment
# =============================================================================


@pytest.fixture
def chain() -> Chain:
    """A fresh chain at a fixed block time."""
    return Chain(timestamp=START_TIMESTAMP)


@pytest.fixture
def deployment(chain: Chain) -> Deployment:
    """Factory and router with the default fee schedule."""
    return deploy(chain)


@pytest.fixture
def factory(deployment: Deployment) -> Factory:
    return deployment.factory


@pytest.fixture
def router(deployment: Deployment) -> Router:
    return deployment.router


# =============================================================================
# Tokens and accounts
# =============================================================================


@pytest.fixture
def token_a(chain: Chain) -> ERC20:
    return make_token(chain, "TKA")


@pytest.fixture
def token_b(chain: Chain) -> ERC20:
    return make_token(chain, "TKB")


@pytest.fixture
def token_c(chain: Chain) -> ERC20:
    return make_token(chain, "TKC")


@pytest.fixture
def funded(token_a: ERC20, token_b: ERC20, token_c: ERC20, router: Router) -> None:
    """ALICE and BOB hold every test token and have approved the router."""
    for token in (token_a, token_b, token_c):
        fund(token, ALICE, router)
        fund(token, BOB, router)


# =============================================================================
# Pairs
# =============================================================================


@pytest.fixture
def pair(factory: Factory, token_a: ERC20, token_b: ERC20) -> Pair:
    """An empty, initialized pair for token_a/token_b."""
    factory.create_pair(token_a.address, token_b.address)
    created = factory.pair(token_a.address, token_b.address)
    assert created is not None
    return created


def sorted_tokens(pair: Pair, token_a: ERC20, token_b: ERC20) -> tuple[ERC20, ERC20]:
    """Return (token0, token1) contracts in the pair's canonical order."""
    if pair.token0 == token_a.address:
        return token_a, token_b
    return token_b, token_a


@pytest.fixture
def pair_tokens(pair: Pair, token_a: ERC20, token_b: ERC20) -> tuple[ERC20, ERC20]:
    """The pair's (token0, token1) contracts."""
    return sorted_tokens(pair, token_a, token_b)
