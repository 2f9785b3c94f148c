"""Tests for the ERC20 reference token and the shared ledger."""

import pytest

from cpamm.constants import INFINITE_ALLOWANCE
from cpamm.errors import InsufficientAllowanceError, InsufficientBalanceError, TokenError
from cpamm.events import Approval, Transfer
from cpamm.models.types import ZERO_ADDRESS
from cpamm.token import Token
from tests.helpers import ALICE, BOB, CAROL, make_token


@pytest.fixture
def token(chain):
    token = make_token(chain, "TKA", decimals=6)
    token.mint(ALICE, 1_000)
    return token


class TestERC20Basics:
    """Metadata, mint and transfer."""

    def test_metadata(self, token):
        assert token.name == "Token TKA"
        assert token.symbol == "TKA"
        assert token.decimals == 6

    def test_satisfies_token_protocol(self, token):
        assert isinstance(token, Token)

    def test_mint_increases_supply(self, token):
        assert token.total_supply == 1_000
        assert token.balance_of(ALICE) == 1_000
        mint_event = token.chain.events_of(Transfer, token.address)[0]
        assert mint_event.from_ == ZERO_ADDRESS

    def test_negative_mint_rejected(self, token):
        with pytest.raises(ValueError):
            token.mint(ALICE, -1)

    def test_transfer(self, token):
        assert token.transfer(ALICE, BOB, 300) is True
        assert token.balance_of(ALICE) == 700
        assert token.balance_of(BOB) == 300
        assert token.total_supply == 1_000

    def test_transfer_insufficient_balance(self, token):
        with pytest.raises(InsufficientBalanceError):
            token.transfer(BOB, ALICE, 1)

    def test_addresses_are_case_insensitive(self, token):
        assert token.balance_of(ALICE.upper().replace("0X", "0x")) == 1_000


class TestERC20Allowances:
    """approve / transfer_from semantics."""

    def test_approve_emits(self, token):
        token.approve(ALICE, BOB, 50)
        assert token.allowance(ALICE, BOB) == 50
        assert token.chain.events_of(Approval)[-1].value == 50

    def test_transfer_from_consumes_allowance(self, token):
        token.approve(ALICE, BOB, 50)
        token.transfer_from(BOB, ALICE, CAROL, 20)
        assert token.allowance(ALICE, BOB) == 30
        assert token.balance_of(CAROL) == 20

    def test_transfer_from_over_allowance(self, token):
        token.approve(ALICE, BOB, 10)
        with pytest.raises(InsufficientAllowanceError):
            token.transfer_from(BOB, ALICE, CAROL, 11)
        assert token.allowance(ALICE, BOB) == 10

    def test_infinite_allowance_not_decremented(self, token):
        token.approve(ALICE, BOB, INFINITE_ALLOWANCE)
        token.transfer_from(BOB, ALICE, CAROL, 500)
        assert token.allowance(ALICE, BOB) == INFINITE_ALLOWANCE

    def test_balance_failure_restores_allowance(self, token):
        """The allowance spend is rolled back with the failed transfer."""
        token.approve(ALICE, BOB, 5_000)
        with pytest.raises(InsufficientBalanceError):
            token.transfer_from(BOB, ALICE, CAROL, 2_000)
        assert token.allowance(ALICE, BOB) == 5_000

    def test_token_errors_share_base(self):
        assert issubclass(InsufficientAllowanceError, TokenError)
        assert issubclass(InsufficientBalanceError, TokenError)
