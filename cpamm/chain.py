"""In-process execution environment for AMM contracts.

The Chain owns everything the contracts share: the address space, the block
timestamp, the event log, and transaction boundaries. A transaction is
all-or-nothing: inside the outermost `transaction()` scope a contract's
state is snapshotted the first time the contract writes to it, and any
exception raised inside restores those snapshots (and drops contracts deployed
and events emitted during the scope) before propagating.
"""

from __future__ import annotations

import copy
import functools
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, ClassVar, ParamSpec, TypeVar

import structlog
from eth_utils import keccak

from cpamm.events import Event
from cpamm.models.types import normalize_address

logger = structlog.get_logger()

P = ParamSpec("P")
R = TypeVar("R")
E = TypeVar("E", bound=Event)


class Contract:
    """Base class for anything deployed on a Chain.

    Subclasses list the attributes that make up their persistent state in
    `_state_fields`. Those attributes must hold plain data (ints, strings,
    dicts/lists of them), never references to other contracts, and every
    method that writes them calls `_touch()` first.
    """

    _state_fields: ClassVar[tuple[str, ...]] = ()

    def __init__(self, chain: Chain, address: str) -> None:
        self.chain = chain
        self.address = normalize_address(address, validate=True)
        chain.deploy(self)

    def snapshot(self) -> dict[str, Any]:
        return {name: copy.deepcopy(getattr(self, name)) for name in self._state_fields}

    def restore(self, state: dict[str, Any]) -> None:
        for name, value in state.items():
            setattr(self, name, value)

    def _touch(self) -> None:
        self.chain.touch(self)

    def emit(self, event_type: type[Event], **fields: Any) -> None:
        self.chain.emit(event_type(address=self.address, **fields))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.address})"


class Chain:
    """Global, sequential state shared by all contracts."""

    def __init__(self, timestamp: int | None = None) -> None:
        self._timestamp = int(time.time()) if timestamp is None else timestamp
        self._contracts: dict[str, Contract] = {}
        self._depth = 0
        self._nonce = 0
        self._journal: dict[str, tuple[Contract, dict[str, Any]]] = {}
        self._deployed: list[str] = []
        self.events: list[Event] = []

    # --- Time ---

    @property
    def timestamp(self) -> int:
        """Current block timestamp in seconds."""
        return self._timestamp

    def set_timestamp(self, timestamp: int) -> None:
        if timestamp < self._timestamp:
            raise ValueError(f"Timestamp cannot go backwards: {timestamp} < {self._timestamp}")
        self._timestamp = timestamp

    def advance_time(self, seconds: int) -> None:
        self.set_timestamp(self._timestamp + seconds)

    # --- Address space ---

    def new_address(self, label: str = "account") -> str:
        """Derive a fresh, unused address from a label and a chain-local nonce."""
        self._nonce += 1
        return "0x" + keccak(text=f"{label}:{self._nonce}")[12:].hex()

    def deploy(self, contract: Contract) -> None:
        if contract.address in self._contracts:
            raise ValueError(f"Address already in use: {contract.address}")
        self._contracts[contract.address] = contract
        if self._depth > 0:
            self._deployed.append(contract.address)
        logger.debug(
            "contract_deployed",
            kind=type(contract).__name__,
            address=contract.address,
        )

    def contract_at(self, address: str) -> Contract | None:
        return self._contracts.get(normalize_address(address))

    def has_code(self, address: str) -> bool:
        return normalize_address(address) in self._contracts

    # --- Events ---

    def emit(self, event: Event) -> None:
        self.events.append(event)
        logger.debug("event_emitted", event_name=event.name, address=event.address)

    def events_of(self, event_type: type[E], address: str | None = None) -> list[E]:
        """Events of one type, optionally restricted to one emitting contract."""
        wanted = normalize_address(address) if address is not None else None
        return [
            event
            for event in self.events
            if isinstance(event, event_type) and (wanted is None or event.address == wanted)
        ]

    # --- Transactions ---

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    def touch(self, contract: Contract) -> None:
        """Snapshot a contract before its first write in the current transaction."""
        if self._depth > 0 and contract.address not in self._journal:
            self._journal[contract.address] = (contract, contract.snapshot())

    @contextmanager
    def transaction(self, label: str = "call") -> Iterator[None]:
        """Run a block atomically.

        Nested scopes join the enclosing transaction; only the outermost
        scope snapshots and rolls back.
        """
        if self._depth > 0:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        event_count = len(self.events)

        self._depth = 1
        try:
            yield
        except Exception as err:
            for contract, state in self._journal.values():
                contract.restore(state)
            for address in self._deployed:
                self._contracts.pop(address, None)
            del self.events[event_count:]
            logger.debug(
                "transaction_rolled_back",
                label=label,
                reason=getattr(err, "reason", type(err).__name__),
            )
            raise
        finally:
            self._depth = 0
            self._journal = {}
            self._deployed = []


def transactional(method: Callable[P, R]) -> Callable[P, R]:
    """Run a Contract (or Router) method inside its chain's transaction scope."""

    @functools.wraps(method)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        self = args[0]
        with self.chain.transaction(method.__name__):  # type: ignore[attr-defined]
            return method(*args, **kwargs)

    return wrapper
