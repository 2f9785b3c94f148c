"""Constant-product amount math and deterministic pair addressing.

The swap formula with the fee taken on input:

    amount_out = (amount_in * fee_num * reserve_out) / (reserve_in * fee_den + amount_in * fee_num)

and its inverse, rounded up so the payer never underpays:

    amount_in = (reserve_in * amount_out * fee_den) / ((reserve_out - amount_out) * fee_num) + 1

With the default config fee_num/fee_den is 997/1000 (a 0.3% fee).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from eth_abi.packed import encode_packed
from eth_utils import keccak

from cpamm.config import DEFAULT_CONFIG, AMMConfig
from cpamm.constants import PAIR_INIT_CODE_HASH
from cpamm.errors import (
    IdenticalAddressesError,
    InsufficientAmountError,
    InsufficientInputAmountError,
    InsufficientLiquidityError,
    InsufficientOutputAmountError,
    InvalidAddressError,
    InvalidPathError,
    PairDoesNotExistError,
    ZeroAddressError,
)
from cpamm.math.safe_uint import U
from cpamm.models.types import ZERO_ADDRESS, is_valid_address, normalize_address
from cpamm.pair import Pair

if TYPE_CHECKING:
    from cpamm.factory import Factory


def sort_tokens(token_a: str, token_b: str) -> tuple[str, str]:
    """Order two token addresses canonically (token0 < token1).

    Raises:
        IdenticalAddressesError: If both addresses are the same
        ZeroAddressError: If either token is empty or the zero address
        InvalidAddressError: If either token is not a 20-byte hex address
    """
    token_a = normalize_address(token_a) if token_a else "0x"
    token_b = normalize_address(token_b) if token_b else "0x"
    if token_a == token_b:
        raise IdenticalAddressesError(f"Identical tokens: {token_a}")
    token0, token1 = (token_a, token_b) if token_a < token_b else (token_b, token_a)
    for token in (token0, token1):
        if token in ("0x", ZERO_ADDRESS):
            raise ZeroAddressError(f"Token address is empty or zero: {token}")
        if not is_valid_address(token):
            raise InvalidAddressError(f"Invalid token address: {token}")
    return token0, token1


def create2_address(deployer: str, salt: bytes, init_code_hash: bytes) -> str:
    """Address of a contract created with CREATE2."""
    deployer_bytes = bytes.fromhex(normalize_address(deployer)[2:])
    digest = keccak(b"\xff" + deployer_bytes + salt + init_code_hash)
    return "0x" + digest[12:].hex()


def pair_salt(token0: str, token1: str) -> bytes:
    """CREATE2 salt for a canonically ordered pair."""
    return keccak(
        encode_packed(
            ["address", "address"],
            [bytes.fromhex(token0[2:]), bytes.fromhex(token1[2:])],
        )
    )


def pair_for(factory_address: str, token_a: str, token_b: str) -> str:
    """Compute a pair's address without any registry lookup.

    Argument order does not matter; (A, B) and (B, A) map to one address.
    """
    token0, token1 = sort_tokens(token_a, token_b)
    return create2_address(factory_address, pair_salt(token0, token1), PAIR_INIT_CODE_HASH)


class ConstantProductMath:
    """Pure amount calculations for constant-product pairs.

    All arithmetic is integer and truncating; `get_amount_out` rounds down and
    `get_amount_in` rounds up, both in favor of the pool.
    """

    def __init__(self, config: AMMConfig = DEFAULT_CONFIG) -> None:
        self.config = config

    def quote(self, amount_a: int, reserve_a: int, reserve_b: int) -> int:
        """Amount of B worth `amount_a` of A at the current reserve ratio (no fee)."""
        if amount_a <= 0:
            raise InsufficientAmountError()
        if reserve_a <= 0 or reserve_b <= 0:
            raise InsufficientLiquidityError()
        return (U(amount_a) * reserve_b // reserve_a).value

    def get_amount_out(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        """Maximum output for an exact input.

        Raises:
            InsufficientInputAmountError: If amount_in is not positive
            InsufficientLiquidityError: If either reserve is not positive
        """
        if amount_in <= 0:
            raise InsufficientInputAmountError()
        if reserve_in <= 0 or reserve_out <= 0:
            raise InsufficientLiquidityError()

        amount_in_with_fee = U(amount_in) * self.config.fee_numerator
        numerator = amount_in_with_fee * reserve_out
        denominator = U(reserve_in) * self.config.fee_denominator + amount_in_with_fee
        return (numerator // denominator).value

    def get_amount_in(self, amount_out: int, reserve_in: int, reserve_out: int) -> int:
        """Minimum input required for an exact output.

        Raises:
            InsufficientOutputAmountError: If amount_out is not positive
            InsufficientLiquidityError: If a reserve is not positive or the
                output would drain the reserve
        """
        if amount_out <= 0:
            raise InsufficientOutputAmountError()
        if reserve_in <= 0 or reserve_out <= 0:
            raise InsufficientLiquidityError()
        if amount_out >= reserve_out:
            raise InsufficientLiquidityError(
                f"Output {amount_out} would drain reserve {reserve_out}"
            )

        numerator = U(reserve_in) * amount_out * self.config.fee_denominator
        denominator = (U(reserve_out) - amount_out) * self.config.fee_numerator
        return (numerator // denominator + 1).value

    def get_reserves(self, factory: Factory, token_a: str, token_b: str) -> tuple[int, int]:
        """Reserves of the (A, B) pair, ordered as the arguments are."""
        token0, _ = sort_tokens(token_a, token_b)
        pair = self.pair(factory, token_a, token_b)
        reserve0, reserve1, _ = pair.get_reserves()
        if normalize_address(token_a) == token0:
            return reserve0, reserve1
        return reserve1, reserve0

    def pair(self, factory: Factory, token_a: str, token_b: str) -> Pair:
        """Resolve the deployed pair for two tokens.

        Raises:
            PairDoesNotExistError: If nothing is deployed at the derived address
        """
        address = pair_for(factory.address, token_a, token_b)
        contract = factory.chain.contract_at(address)
        if not isinstance(contract, Pair):
            raise PairDoesNotExistError(f"No pair for {token_a}/{token_b}")
        return contract

    def get_amounts_out(self, factory: Factory, amount_in: int, path: Sequence[str]) -> list[int]:
        """Chain get_amount_out along a path; amounts[0] is the input."""
        if len(path) < 2:
            raise InvalidPathError()
        amounts = [amount_in]
        for token_in, token_out in zip(path, path[1:]):
            reserve_in, reserve_out = self.get_reserves(factory, token_in, token_out)
            amounts.append(self.get_amount_out(amounts[-1], reserve_in, reserve_out))
        return amounts

    def get_amounts_in(self, factory: Factory, amount_out: int, path: Sequence[str]) -> list[int]:
        """Chain get_amount_in backward along a path; amounts[-1] is the output."""
        if len(path) < 2:
            raise InvalidPathError()
        amounts = [0] * len(path)
        amounts[-1] = amount_out
        for i in range(len(path) - 1, 0, -1):
            reserve_in, reserve_out = self.get_reserves(factory, path[i - 1], path[i])
            amounts[i - 1] = self.get_amount_in(amounts[i], reserve_in, reserve_out)
        return amounts


# Singleton instance using the default fee schedule
constant_product = ConstantProductMath()
