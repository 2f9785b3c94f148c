"""CPAMM - constant-product automated market maker."""

from cpamm.chain import Chain
from cpamm.config import DEFAULT_CONFIG, AMMConfig
from cpamm.deployment import Deployment, deploy
from cpamm.factory import Factory
from cpamm.pair import Pair
from cpamm.router import Router
from cpamm.token import ERC20

__version__ = "0.1.0"
__all__ = [
    "AMMConfig",
    "Chain",
    "DEFAULT_CONFIG",
    "Deployment",
    "ERC20",
    "Factory",
    "Pair",
    "Router",
    "deploy",
    "__version__",
]
