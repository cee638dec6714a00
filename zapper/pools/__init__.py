"""External liquidity: stableswap pools, the weighted-pool vault and the pool directory."""

from zapper.pools.curve import CurveStableswapPool, PoolError, StableswapPoolState
from zapper.pools.registry import PoolDirectory
from zapper.pools.vault import (
    BalancerVault,
    FundManagement,
    SingleSwap,
    VaultError,
    WeightedPoolState,
    weighted_swap_out,
)

__all__ = [
    "BalancerVault",
    "CurveStableswapPool",
    "FundManagement",
    "PoolDirectory",
    "PoolError",
    "SingleSwap",
    "StableswapPoolState",
    "VaultError",
    "WeightedPoolState",
    "weighted_swap_out",
]
