"""Tests for event models and the error hierarchy."""

import pytest
from pydantic import TypeAdapter, ValidationError

from cpamm.errors import (
    AMMError,
    ExpiredError,
    InputValidationError,
    InvariantViolationError,
    LockedError,
    ReserveOverflowError,
    StateConflictError,
)
from cpamm.events import AnyEvent, PairCreated, Swap, Sync, Transfer
from tests.helpers import ALICE, BOB

EMITTER = "0x" + "ab" * 20


class TestEventModels:
    """Pydantic event models."""

    def test_aliases_round_trip(self):
        """Wire names use the camelCase / reserved-word aliases."""
        event = Swap.model_validate(
            {
                "address": EMITTER,
                "sender": ALICE,
                "amount0In": 1,
                "amount1In": 0,
                "amount0Out": 0,
                "amount1Out": 2,
                "to": BOB,
            }
        )
        assert event.amount0_in == 1
        assert event.model_dump(by_alias=True)["amount1Out"] == 2

    def test_transfer_from_alias(self):
        event = Transfer(address=EMITTER, from_=ALICE, to=BOB, value=3)
        assert event.model_dump(by_alias=True)["from"] == ALICE

    def test_addresses_normalized(self):
        event = Sync(address=EMITTER.upper().replace("0X", "0x"), reserve0=1, reserve1=2)
        assert event.address == EMITTER

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError):
            Sync(address=EMITTER, reserve0=-1, reserve1=0)

    def test_frozen(self):
        event = Sync(address=EMITTER, reserve0=1, reserve1=2)
        with pytest.raises(ValidationError):
            event.reserve0 = 5  # type: ignore[misc]

    def test_name(self):
        assert Sync(address=EMITTER, reserve0=0, reserve1=0).name == "Sync"

    def test_discriminated_by_kind(self):
        adapter = TypeAdapter(AnyEvent)
        event = adapter.validate_python(
            {"kind": "PairCreated", "address": EMITTER, "token0": ALICE, "token1": BOB,
             "pair": EMITTER, "count": 1}
        )
        assert isinstance(event, PairCreated)


class TestErrorHierarchy:
    """Reason codes and categories."""

    def test_message_defaults_to_reason(self):
        assert str(ExpiredError()) == "EXPIRED"
        assert str(ExpiredError("late")) == "late"

    @pytest.mark.parametrize(
        "error,reason,category",
        [
            (ExpiredError, "EXPIRED", InputValidationError),
            (LockedError, "LOCKED", StateConflictError),
            (InvariantViolationError, "K", AMMError),
            (ReserveOverflowError, "OVERFLOW", AMMError),
        ],
    )
    def test_reasons(self, error, reason, category):
        assert error.reason == reason
        assert issubclass(error, category)
