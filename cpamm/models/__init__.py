"""Shared models for addresses and amounts."""

from cpamm.models.types import (
    ZERO_ADDRESS,
    Address,
    Uint256,
    is_valid_address,
    normalize_address,
    validate_uint256,
)

__all__ = [
    "ZERO_ADDRESS",
    "Address",
    "Uint256",
    "is_valid_address",
    "normalize_address",
    "validate_uint256",
]
