"""ABI calldata encoding for router calls.

Produces the calldata an external client would send to a deployed router,
with the standard 4-byte selectors of the constant-product router ABI.
"""

from __future__ import annotations

from collections.abc import Sequence

from eth_abi import encode  # type: ignore[attr-defined]
from eth_utils import function_signature_to_4byte_selector

from cpamm.models.types import is_valid_address

ADD_LIQUIDITY_SIGNATURE = (
    "addLiquidity(address,address,uint256,uint256,uint256,uint256,address,uint256)"
)
REMOVE_LIQUIDITY_SIGNATURE = (
    "removeLiquidity(address,address,uint256,uint256,uint256,address,uint256)"
)
SWAP_EXACT_TOKENS_SIGNATURE = (
    "swapExactTokensForTokens(uint256,uint256,address[],address,uint256)"
)
SWAP_TOKENS_FOR_EXACT_SIGNATURE = (
    "swapTokensForExactTokens(uint256,uint256,address[],address,uint256)"
)


def selector(signature: str) -> str:
    """0x-prefixed 4-byte function selector for a signature."""
    return "0x" + function_signature_to_4byte_selector(signature).hex()


def _address_bytes(name: str, address: str) -> bytes:
    if not is_valid_address(address):
        raise ValueError(f"Invalid {name} address: {address}")
    return bytes.fromhex(address[2:])


def _encode_call(signature: str, types: list[str], args: list[object]) -> str:
    return selector(signature) + encode(types, args).hex()


def encode_add_liquidity(
    token_a: str,
    token_b: str,
    amount_a_desired: int,
    amount_b_desired: int,
    amount_a_min: int,
    amount_b_min: int,
    to: str,
    deadline: int,
) -> str:
    return _encode_call(
        ADD_LIQUIDITY_SIGNATURE,
        ["address", "address", "uint256", "uint256", "uint256", "uint256", "address", "uint256"],
        [
            _address_bytes("token_a", token_a),
            _address_bytes("token_b", token_b),
            amount_a_desired,
            amount_b_desired,
            amount_a_min,
            amount_b_min,
            _address_bytes("recipient", to),
            deadline,
        ],
    )


def encode_remove_liquidity(
    token_a: str,
    token_b: str,
    liquidity: int,
    amount_a_min: int,
    amount_b_min: int,
    to: str,
    deadline: int,
) -> str:
    return _encode_call(
        REMOVE_LIQUIDITY_SIGNATURE,
        ["address", "address", "uint256", "uint256", "uint256", "address", "uint256"],
        [
            _address_bytes("token_a", token_a),
            _address_bytes("token_b", token_b),
            liquidity,
            amount_a_min,
            amount_b_min,
            _address_bytes("recipient", to),
            deadline,
        ],
    )


def _encode_swap(
    signature: str,
    amount0: int,
    amount1: int,
    path: Sequence[str],
    to: str,
    deadline: int,
) -> str:
    path_bytes = [_address_bytes(f"path[{i}]", addr) for i, addr in enumerate(path)]
    return _encode_call(
        signature,
        ["uint256", "uint256", "address[]", "address", "uint256"],
        [amount0, amount1, path_bytes, _address_bytes("recipient", to), deadline],
    )


def encode_swap_exact_tokens_for_tokens(
    amount_in: int,
    amount_out_min: int,
    path: Sequence[str],
    to: str,
    deadline: int,
) -> str:
    """Calldata for swapExactTokensForTokens.

    Raises:
        ValueError: If any address is invalid
    """
    return _encode_swap(SWAP_EXACT_TOKENS_SIGNATURE, amount_in, amount_out_min, path, to, deadline)


def encode_swap_tokens_for_exact_tokens(
    amount_out: int,
    amount_in_max: int,
    path: Sequence[str],
    to: str,
    deadline: int,
) -> str:
    return _encode_swap(
        SWAP_TOKENS_FOR_EXACT_SIGNATURE, amount_out, amount_in_max, path, to, deadline
    )
