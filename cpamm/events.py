"""Pydantic models for events emitted by the factory, pairs and tokens.

Events are appended to the chain's event log in emission order and are
discarded together with every other effect when a transaction reverts.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from cpamm.models.types import Address

UintValue = Annotated[int, Field(ge=0)]


class Event(BaseModel):
    """Base event. `address` is the contract that emitted it."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    address: Address = Field(description="Emitting contract")

    @property
    def name(self) -> str:
        return type(self).__name__


class PairCreated(Event):
    kind: Literal["PairCreated"] = "PairCreated"
    token0: Address
    token1: Address
    pair: Address
    count: int = Field(ge=1, description="Number of pairs after this creation")


class Mint(Event):
    kind: Literal["Mint"] = "Mint"
    sender: Address
    amount0: UintValue
    amount1: UintValue


class Burn(Event):
    kind: Literal["Burn"] = "Burn"
    sender: Address
    amount0: UintValue
    amount1: UintValue
    to: Address


class Swap(Event):
    kind: Literal["Swap"] = "Swap"
    sender: Address
    amount0_in: UintValue = Field(alias="amount0In")
    amount1_in: UintValue = Field(alias="amount1In")
    amount0_out: UintValue = Field(alias="amount0Out")
    amount1_out: UintValue = Field(alias="amount1Out")
    to: Address


class Sync(Event):
    kind: Literal["Sync"] = "Sync"
    reserve0: UintValue
    reserve1: UintValue


class Transfer(Event):
    kind: Literal["Transfer"] = "Transfer"
    from_: Address = Field(alias="from")
    to: Address
    value: UintValue


class Approval(Event):
    kind: Literal["Approval"] = "Approval"
    owner: Address
    spender: Address
    value: UintValue


AnyEvent = PairCreated | Mint | Burn | Swap | Sync | Transfer | Approval

__all__ = [
    "AnyEvent",
    "Approval",
    "Burn",
    "Event",
    "Mint",
    "PairCreated",
    "Swap",
    "Sync",
    "Transfer",
]
