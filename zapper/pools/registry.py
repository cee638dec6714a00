"""Directory of the stableswap pools a router may deposit into or withdraw from.

Pool order and size come from configuration: a leg descriptor is only
accepted if its basket and LP token match the registered pool exactly.
"""

from __future__ import annotations

from collections.abc import Iterator

import structlog

from zapper.errors import InvalidBasket, InvalidRequest
from zapper.models.types import normalize_address
from zapper.models.zap import PoolLegDescriptor
from zapper.pools.curve import CurveStableswapPool

logger = structlog.get_logger()


class PoolDirectory:
    """Stableswap pools keyed by address."""

    def __init__(self, pools: list[CurveStableswapPool] | None = None) -> None:
        self._pools: dict[str, CurveStableswapPool] = {}
        if pools:
            for pool in pools:
                self.add_pool(pool)

    def add_pool(self, pool: CurveStableswapPool) -> None:
        if pool.address in self._pools:
            logger.debug("pool_already_registered", pool=pool.address)
            return
        self._pools[pool.address] = pool

    def get(self, address: str) -> CurveStableswapPool | None:
        return self._pools.get(normalize_address(address))

    def resolve(self, descriptor: PoolLegDescriptor) -> CurveStableswapPool:
        """Return the pool a descriptor names, checking its basket against the pool.

        Raises:
            InvalidRequest: If no pool is registered at the descriptor's address
            InvalidBasket: If the basket size, order or LP token differ from the pool's
        """
        pool = self._pools.get(descriptor.pool)
        if pool is None:
            raise InvalidRequest(f"Unknown pool {descriptor.pool}")
        if descriptor.basket_assets != pool.coins:
            raise InvalidBasket(
                f"Basket {list(descriptor.basket_assets)} does not match pool coins {list(pool.coins)}"
            )
        if descriptor.lp_token != pool.lp_token:
            raise InvalidBasket(f"LP token {descriptor.lp_token} is not {pool.lp_token}")
        return pool

    def __len__(self) -> int:
        return len(self._pools)

    def __iter__(self) -> Iterator[CurveStableswapPool]:
        return iter(self._pools.values())
