"""Pair factory: deterministic creation and lookup of constant-product pairs.

Each unordered token pair has at most one Pair. Its address is derived with
CREATE2 from (factory, token0, token1), so any caller can compute it with
`cpamm.library.pair_for` before or without asking the factory.
"""

from __future__ import annotations

from typing import ClassVar

import structlog

from cpamm.chain import Chain, Contract, transactional
from cpamm.config import DEFAULT_CONFIG, AMMConfig
from cpamm.errors import PairExistsError
from cpamm.events import PairCreated
from cpamm.library import pair_for, sort_tokens
from cpamm.models.types import ZERO_ADDRESS, normalize_address
from cpamm.pair import Pair

logger = structlog.get_logger()


class Factory(Contract):
    """Registry of pairs.

    `_pairs` maps both (token0, token1) and (token1, token0) to the pair
    address; `_all_pairs` lists pair addresses in creation order.
    """

    _state_fields: ClassVar[tuple[str, ...]] = ("_pairs", "_all_pairs")

    def __init__(
        self,
        chain: Chain,
        config: AMMConfig = DEFAULT_CONFIG,
        address: str | None = None,
    ) -> None:
        self.config = config
        self._pairs: dict[tuple[str, str], str] = {}
        self._all_pairs: list[str] = []
        super().__init__(chain, address if address is not None else chain.new_address("factory"))

    @transactional
    def create_pair(self, token_a: str, token_b: str) -> str:
        """Deploy and register the pair for two tokens.

        Returns:
            The new pair's address

        Raises:
            IdenticalAddressesError: If token_a == token_b
            ZeroAddressError: If either token is the zero address
            PairExistsError: If the pair was already created
        """
        token0, token1 = sort_tokens(token_a, token_b)
        if (token0, token1) in self._pairs:
            raise PairExistsError(f"Pair {token0}/{token1} already exists")

        address = pair_for(self.address, token0, token1)
        if self.chain.has_code(address):
            raise PairExistsError(f"Address {address} already in use")

        pair = Pair(self.chain, address, factory=self.address, config=self.config)
        pair.initialize(self.address, token0, token1)

        self._touch()
        self._pairs[(token0, token1)] = address
        self._pairs[(token1, token0)] = address
        self._all_pairs.append(address)

        count = len(self._all_pairs)
        self.emit(PairCreated, token0=token0, token1=token1, pair=address, count=count)
        logger.debug(
            "pair_created",
            token0=token0[-8:],
            token1=token1[-8:],
            pair=address,
            count=count,
        )
        return address

    def get_pair(self, token_a: str, token_b: str) -> str:
        """Pair address for two tokens in either order, or ZERO_ADDRESS."""
        key = (normalize_address(token_a), normalize_address(token_b))
        return self._pairs.get(key, ZERO_ADDRESS)

    def pair(self, token_a: str, token_b: str) -> Pair | None:
        """Deployed Pair for two tokens in either order, or None."""
        address = self.get_pair(token_a, token_b)
        if address == ZERO_ADDRESS:
            return None
        contract = self.chain.contract_at(address)
        return contract if isinstance(contract, Pair) else None

    def all_pairs_length(self) -> int:
        return len(self._all_pairs)

    def all_pairs(self, index: int) -> str:
        """Address of the index-th pair ever created.

        Raises:
            IndexError: If index is out of range
        """
        if not 0 <= index < len(self._all_pairs):
            raise IndexError(f"Pair index {index} out of range ({len(self._all_pairs)} pairs)")
        return self._all_pairs[index]

    pair_count = all_pairs_length
    pair_at = all_pairs

    def iter_pairs(self) -> list[Pair]:
        """All deployed pairs in creation order."""
        return [
            contract
            for contract in (self.chain.contract_at(address) for address in self._all_pairs)
            if isinstance(contract, Pair)
        ]
