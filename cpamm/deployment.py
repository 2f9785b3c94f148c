"""Wire a chain, a factory and a router together."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from cpamm.chain import Chain
from cpamm.config import DEFAULT_CONFIG, AMMConfig
from cpamm.factory import Factory
from cpamm.router import Router

logger = structlog.get_logger()


@dataclass
class Deployment:
    chain: Chain
    factory: Factory
    router: Router


def deploy(chain: Chain | None = None, config: AMMConfig = DEFAULT_CONFIG) -> Deployment:
    """Deploy a factory and a router bound to it."""
    chain = chain if chain is not None else Chain()
    factory = Factory(chain, config=config)
    router = Router(factory)
    logger.info(
        "amm_deployed",
        factory=factory.address,
        router=router.address,
        fee_bps=config.fee_bps,
    )
    return Deployment(chain=chain, factory=factory, router=router)


_default_deployment: Deployment | None = None


def get_default_deployment() -> Deployment:
    """Process-wide deployment, configured from the environment on first use."""
    global _default_deployment
    if _default_deployment is None:
        _default_deployment = deploy(config=AMMConfig.from_env())
    return _default_deployment
