"""Side-effect-free quotes for the four route shapes.

A quote walks the same RoutePlan the router executes and prices every leg
with the functions the live pool and vault use, on their current state. On
unchanged state a quote therefore equals the executed amount exactly.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

import structlog

from zapper.errors import EstimationInvalid, ZapError
from zapper.math.errors import MathError
from zapper.math.fixed_point import LogExpMathError
from zapper.models.zap import PoolLegDescriptor, ZapInRequest, ZapOutRequest
from zapper.pools.registry import PoolDirectory
from zapper.pools.vault import BalancerVault, VaultError, weighted_swap_out
from zapper.routing.plan import (
    plan_swap_3crv_and_zap_in,
    plan_zap_in,
    plan_zap_out,
    plan_zap_out_and_swap_3crv,
)
from zapper.routing.types import DepositLeg, Leg, RoutePlan, RouteQuote, VaultSwapLeg, WithdrawLeg
from zapper.safe_int import SafeIntError

logger = structlog.get_logger()

_QUOTE_ERRORS = (
    ZapError,
    MathError,
    SafeIntError,
    LogExpMathError,
    VaultError,
    KeyError,
    IndexError,
    ZeroDivisionError,
)


class Estimator:
    """Prices route plans against the current pool and vault state."""

    def __init__(
        self,
        pools: PoolDirectory,
        vault: BalancerVault,
        *,
        base_pool_leg: PoolLegDescriptor | None = None,
    ) -> None:
        self.pools = pools
        self.vault = vault
        self.base_pool_leg = base_pool_leg

    def quote(self, plan: RoutePlan) -> RouteQuote:
        """Expected output of every leg of ``plan``.

        Raises:
            EstimationInvalid: If any leg cannot be priced
        """
        leg_amounts: list[int] = []
        carried: int | None = None
        try:
            for leg in plan.legs:
                carried = self._quote_leg(leg, carried)
                leg_amounts.append(carried)
        except _QUOTE_ERRORS as e:
            logger.debug("estimate_failed", shape=plan.shape.value, error=str(e))
            raise EstimationInvalid(f"Cannot quote {plan.shape.value}: {e}") from e
        return RouteQuote(shape=plan.shape, leg_amounts=tuple(leg_amounts))

    def estimate_zap_in(self, request: ZapInRequest) -> int:
        """Principal tokens a zap in of ``request`` would deliver now."""
        return self.quote(self._plan(plan_zap_in, request, self.pools)).amount

    def estimate_zap_out(self, request: ZapOutRequest) -> int:
        """Basket asset a zap out of ``request`` would deliver now."""
        return self.quote(self._plan(plan_zap_out, request, self.pools)).amount

    def estimate_swap_3crv_and_zap_in(self, request: ZapInRequest, base_amounts: Sequence[int]) -> int:
        plan = self._plan(plan_swap_3crv_and_zap_in, request, base_amounts, self.base_pool_leg, self.pools)
        return self.quote(plan).amount

    def estimate_zap_out_and_swap_3crv(self, request: ZapOutRequest, base_output_index: int) -> int:
        plan = self._plan(
            plan_zap_out_and_swap_3crv, request, base_output_index, self.base_pool_leg, self.pools
        )
        return self.quote(plan).amount

    def _plan(self, builder: Callable[..., RoutePlan], *args: object) -> RoutePlan:
        try:
            return builder(*args)
        except ZapError as e:
            raise EstimationInvalid(str(e)) from e

    def _quote_leg(self, leg: Leg, carried: int | None) -> int:
        if isinstance(leg, DepositLeg):
            state = self.pools.resolve(leg.pool).state
            return state.quote_add_liquidity(leg.basket_for(carried)).mint_amount
        if isinstance(leg, WithdrawLeg):
            state = self.pools.resolve(leg.pool).state
            return state.quote_withdraw_one_coin(carried or 0, leg.output_index).amount
        if isinstance(leg, VaultSwapLeg):
            amount_in = leg.amount_in if leg.amount_in is not None else carried
            if not amount_in:
                raise EstimationInvalid("Vault swap with zero input")
            state = self.vault.pool_state(leg.vault.vault_pool_id)
            return weighted_swap_out(state, leg.asset_in, leg.asset_out, amount_in)
        raise TypeError(f"Unknown leg {leg!r}")
