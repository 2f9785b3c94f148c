"""API endpoints for the CPAMM service."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from cpamm.api.schemas import (
    ErrorResponse,
    PoolListResponse,
    PoolResponse,
    QuoteRequest,
    QuoteResponse,
)
from cpamm.deployment import Deployment, get_default_deployment
from cpamm.errors import AMMError
from cpamm.models.types import is_valid_address, normalize_address
from cpamm.pair import Pair
from cpamm.pools import describe_pool, list_pools

logger = structlog.get_logger()

router = APIRouter()


def get_deployment() -> Deployment:
    """Dependency provider for the served deployment.

    Override this in tests to serve a prepared deployment:
        app.dependency_overrides[get_deployment] = lambda: deployment

    Returns:
        The deployment whose factory and router back every endpoint.
    """
    return get_default_deployment()


def _bad_request(err: AMMError) -> HTTPException:
    return HTTPException(status_code=400, detail={"error": err.reason, "message": str(err)})


@router.get("/pairs", response_model_by_alias=True)
async def get_pairs(
    filter_term: str = Query(
        default="", alias="filter", description="Match token symbols or addresses"
    ),
    deployment: Deployment = Depends(get_deployment),
) -> PoolListResponse:
    """List pools, largest first."""
    pools = list_pools(deployment.factory, filter_term=filter_term.strip())
    logger.info("listed_pools", count=len(pools), filter=filter_term)
    return PoolListResponse(pools=[PoolResponse.from_pool(pool) for pool in pools])


@router.get("/pairs/{address}", response_model_by_alias=True)
async def get_pair(
    address: str,
    deployment: Deployment = Depends(get_deployment),
) -> PoolResponse:
    """Reserves and token metadata of a single pair.

    Returns 404 if no pair lives at the address.
    """
    if not is_valid_address(normalize_address(address)):
        raise HTTPException(status_code=404, detail="Pair not found")
    contract = deployment.chain.contract_at(normalize_address(address))
    if not isinstance(contract, Pair):
        raise HTTPException(status_code=404, detail="Pair not found")
    return PoolResponse.from_pool(describe_pool(deployment.factory, contract))


@router.post("/quote/amounts-out", responses={400: {"model": ErrorResponse}})
async def quote_amounts_out(
    request: QuoteRequest,
    deployment: Deployment = Depends(get_deployment),
) -> QuoteResponse:
    """Amounts received at every hop for an exact input."""
    try:
        amounts = deployment.router.get_amounts_out(int(request.amount), request.path)
    except AMMError as err:
        logger.info("quote_failed", direction="out", reason=err.reason, path=request.path)
        raise _bad_request(err) from err
    logger.info("quoted", direction="out", amount=request.amount, hops=len(request.path) - 1)
    return QuoteResponse(amounts=[str(amount) for amount in amounts])


@router.post("/quote/amounts-in", responses={400: {"model": ErrorResponse}})
async def quote_amounts_in(
    request: QuoteRequest,
    deployment: Deployment = Depends(get_deployment),
) -> QuoteResponse:
    """Amounts required at every hop for an exact output."""
    try:
        amounts = deployment.router.get_amounts_in(int(request.amount), request.path)
    except AMMError as err:
        logger.info("quote_failed", direction="in", reason=err.reason, path=request.path)
        raise _bad_request(err) from err
    logger.info("quoted", direction="in", amount=request.amount, hops=len(request.path) - 1)
    return QuoteResponse(amounts=[str(amount) for amount in amounts])
