"""Fungible balance ledger shared by plain tokens and pair LP tokens."""

from __future__ import annotations

from typing import ClassVar

from cpamm.chain import Chain, Contract, transactional
from cpamm.constants import INFINITE_ALLOWANCE
from cpamm.errors import InsufficientAllowanceError, InsufficientBalanceError
from cpamm.events import Approval, Transfer
from cpamm.models.types import ZERO_ADDRESS, normalize_address


class FungibleLedger(Contract):
    """ERC20-style balances and allowances.

    `total_supply` always equals the sum of all balances: supply only changes
    through `_mint` and `_burn`, which move balance to or from nowhere.
    """

    _state_fields: ClassVar[tuple[str, ...]] = ("total_supply", "_balances", "_allowances")

    def __init__(self, chain: Chain, address: str, name: str, symbol: str, decimals: int) -> None:
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self.total_supply = 0
        self._balances: dict[str, int] = {}
        self._allowances: dict[str, dict[str, int]] = {}
        super().__init__(chain, address)

    def balance_of(self, account: str) -> int:
        return self._balances.get(normalize_address(account), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get(normalize_address(owner), {}).get(
            normalize_address(spender), 0
        )

    @transactional
    def approve(self, owner: str, spender: str, amount: int) -> bool:
        """Let `spender` move up to `amount` of `owner`'s balance."""
        self._approve(normalize_address(owner), normalize_address(spender), amount)
        return True

    @transactional
    def transfer(self, sender: str, to: str, amount: int) -> bool:
        self._transfer(normalize_address(sender), normalize_address(to), amount)
        return True

    @transactional
    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        """Move `owner`'s balance on behalf of `spender`, consuming allowance.

        An allowance equal to INFINITE_ALLOWANCE is never decremented.
        """
        spender, owner = normalize_address(spender), normalize_address(owner)
        current = self.allowance(owner, spender)
        if current != INFINITE_ALLOWANCE:
            if current < amount:
                raise InsufficientAllowanceError(
                    f"{self.symbol}: allowance {current} < {amount} for spender {spender}"
                )
            self._touch()
            self._allowances.setdefault(owner, {})[spender] = current - amount
        self._transfer(owner, normalize_address(to), amount)
        return True

    # --- Internal ledger operations ---

    def _approve(self, owner: str, spender: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Allowance cannot be negative: {amount}")
        self._touch()
        self._allowances.setdefault(owner, {})[spender] = amount
        self.emit(Approval, owner=owner, spender=spender, value=amount)

    def _transfer(self, sender: str, to: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Transfer amount cannot be negative: {amount}")
        balance = self._balances.get(sender, 0)
        if balance < amount:
            raise InsufficientBalanceError(f"{self.symbol}: balance {balance} < {amount}")
        self._touch()
        self._balances[sender] = balance - amount
        self._balances[to] = self._balances.get(to, 0) + amount
        self._on_transfer(sender, to, amount)
        self.emit(Transfer, from_=sender, to=to, value=amount)

    def _mint(self, to: str, amount: int) -> None:
        self._touch()
        self.total_supply += amount
        self._balances[to] = self._balances.get(to, 0) + amount
        self.emit(Transfer, from_=ZERO_ADDRESS, to=to, value=amount)

    def _burn(self, owner: str, amount: int) -> None:
        balance = self._balances.get(owner, 0)
        if balance < amount:
            raise InsufficientBalanceError(f"{self.symbol}: burn {amount} exceeds {balance}")
        self._touch()
        self._balances[owner] = balance - amount
        self.total_supply -= amount
        self.emit(Transfer, from_=owner, to=ZERO_ADDRESS, value=amount)

    def _on_transfer(self, sender: str, to: str, amount: int) -> None:
        """Hook run after balances move and before Transfer is emitted."""
        pass
