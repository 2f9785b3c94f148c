"""Pydantic request/response models for the HTTP API.

Amounts travel as decimal strings so uint256 values survive JSON clients
that parse numbers as doubles.
"""

from pydantic import BaseModel, Field

from cpamm.models.types import Address, Uint256
from cpamm.pools import PoolInfo


class QuoteRequest(BaseModel):
    amount: Uint256 = Field(description="Exact input (amounts-out) or exact output (amounts-in)")
    path: list[Address] = Field(min_length=2, description="Token path, at least two tokens")


class QuoteResponse(BaseModel):
    amounts: list[Uint256] = Field(description="Amount at every step of the path")


class TokenResponse(BaseModel):
    address: Address
    symbol: str
    decimals: int


class PoolResponse(BaseModel):
    pair_address: Address = Field(alias="pairAddress")
    token0: TokenResponse
    token1: TokenResponse
    reserve0: Uint256
    reserve1: Uint256
    total_supply: Uint256 = Field(alias="totalSupply")
    reserves: tuple[str, str] = Field(description="Reserves in whole-token units")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_pool(cls, pool: PoolInfo) -> "PoolResponse":
        reserve0, reserve1 = pool.reserves
        return cls(
            pair_address=pool.pair_address,
            token0=TokenResponse(
                address=pool.token0.address,
                symbol=pool.token0.symbol,
                decimals=pool.token0.decimals,
            ),
            token1=TokenResponse(
                address=pool.token1.address,
                symbol=pool.token1.symbol,
                decimals=pool.token1.decimals,
            ),
            reserve0=str(pool.reserve0),
            reserve1=str(pool.reserve1),
            total_supply=str(pool.total_supply),
            reserves=(str(reserve0), str(reserve1)),
        )


class PoolListResponse(BaseModel):
    pools: list[PoolResponse]


class ErrorDetail(BaseModel):
    error: str = Field(description="Revert reason code")
    message: str


class ErrorResponse(BaseModel):
    """Body of a 400 response for a call the AMM rejects."""

    detail: ErrorDetail
