"""Route planning: turn a request into the ordered legs of its route shape.

Planning validates the request against the configured pools and makes no
external call, so a malformed basket is rejected before anything moves.
"""

from __future__ import annotations

from collections.abc import Sequence

from zapper.errors import InvalidBasket, InvalidRequest
from zapper.models.zap import PoolLegDescriptor, ZapInRequest, ZapOutRequest
from zapper.pools.registry import PoolDirectory
from zapper.routing.types import DepositLeg, RoutePlan, RouteShape, VaultSwapLeg, WithdrawLeg


def _check_basket(descriptor: PoolLegDescriptor, amounts: Sequence[int], *, allow_empty: bool) -> None:
    if len(amounts) == 0:
        raise InvalidBasket("Basket amounts are empty")
    if len(amounts) != descriptor.n_coins:
        raise InvalidBasket(
            f"Basket of pool {descriptor.pool} has {descriptor.n_coins} assets, got {len(amounts)} amounts"
        )
    if not allow_empty and not any(amounts):
        raise InvalidBasket(f"All basket amounts for pool {descriptor.pool} are zero")


def _check_lp_matches(pool_leg: PoolLegDescriptor, lp_token: str) -> None:
    if lp_token != pool_leg.lp_token:
        raise InvalidRequest(f"Vault leg trades {lp_token}, pool leg mints {pool_leg.lp_token}")


def _inputs(*baskets: tuple[PoolLegDescriptor, Sequence[int]]) -> tuple[tuple[str, int], ...]:
    totals: dict[str, int] = {}
    for descriptor, amounts in baskets:
        for asset, amount in zip(descriptor.basket_assets, amounts):
            if amount:
                totals[asset] = totals.get(asset, 0) + amount
    return tuple(totals.items())


def _check_zap_out(request: ZapOutRequest) -> None:
    _check_lp_matches(request.pool_leg, request.vault_leg.lp_token)
    if request.principal_amount_in == 0:
        raise InvalidRequest("Principal amount in is zero")
    index = request.output_asset_index
    if index >= request.pool_leg.n_coins:
        raise InvalidRequest(f"Output index {index} outside basket of {request.pool_leg.n_coins}")
    if request.pool_leg.basket_assets[index] != request.output_asset:
        raise InvalidRequest(f"Output asset {request.output_asset} is not basket member {index}")


def plan_zap_in(request: ZapInRequest, pools: PoolDirectory) -> RoutePlan:
    """Basket deposit, then LP to principal through the vault."""
    pools.resolve(request.pool_leg)
    _check_basket(request.pool_leg, request.basket_amounts, allow_empty=False)
    _check_lp_matches(request.pool_leg, request.vault_leg.lp_token)

    vault_leg = request.vault_leg
    return RoutePlan(
        shape=RouteShape.ZAP_IN,
        legs=(
            DepositLeg(pool=request.pool_leg, amounts=tuple(request.basket_amounts)),
            VaultSwapLeg(vault=vault_leg, asset_in=vault_leg.lp_token, asset_out=vault_leg.principal_token),
        ),
        inputs=_inputs((request.pool_leg, request.basket_amounts)),
        output_asset=vault_leg.principal_token,
        min_output=request.min_output,
        deadline=request.deadline,
    )


def plan_zap_out(request: ZapOutRequest, pools: PoolDirectory) -> RoutePlan:
    """Principal to LP through the vault, then withdraw one basket coin."""
    pools.resolve(request.pool_leg)
    _check_zap_out(request)

    vault_leg = request.vault_leg
    return RoutePlan(
        shape=RouteShape.ZAP_OUT,
        legs=(
            VaultSwapLeg(
                vault=vault_leg,
                asset_in=vault_leg.principal_token,
                asset_out=vault_leg.lp_token,
                amount_in=request.principal_amount_in,
            ),
            WithdrawLeg(
                pool=request.pool_leg,
                output_index=request.output_asset_index,
                index_is_uint256=request.index_is_uint256,
            ),
        ),
        inputs=((vault_leg.principal_token, request.principal_amount_in),),
        output_asset=request.output_asset,
        min_output=request.min_output,
        deadline=request.deadline,
        intermediate_floor=True,
    )


def plan_swap_3crv_and_zap_in(
    request: ZapInRequest,
    base_amounts: Sequence[int],
    base_leg: PoolLegDescriptor | None,
    pools: PoolDirectory,
) -> RoutePlan:
    """Deposit the base basket, merge its LP into the primary basket, then zap in.

    The primary basket may be all zero: the base deposit supplies it.
    """
    if base_leg is None:
        raise InvalidRequest("No base pool configured for three-hop routes")
    pools.resolve(base_leg)
    pools.resolve(request.pool_leg)
    _check_basket(base_leg, base_amounts, allow_empty=False)
    _check_basket(request.pool_leg, request.basket_amounts, allow_empty=True)
    _check_lp_matches(request.pool_leg, request.vault_leg.lp_token)

    carry_index = request.pool_leg.index_of(base_leg.lp_token)
    if carry_index < 0:
        raise InvalidRequest(f"Base LP {base_leg.lp_token} is not in the basket of {request.pool_leg.pool}")

    vault_leg = request.vault_leg
    return RoutePlan(
        shape=RouteShape.SWAP_3CRV_ZAP_IN,
        legs=(
            DepositLeg(pool=base_leg, amounts=tuple(base_amounts)),
            DepositLeg(
                pool=request.pool_leg,
                amounts=tuple(request.basket_amounts),
                carry_index=carry_index,
            ),
            VaultSwapLeg(vault=vault_leg, asset_in=vault_leg.lp_token, asset_out=vault_leg.principal_token),
        ),
        inputs=_inputs((base_leg, base_amounts), (request.pool_leg, request.basket_amounts)),
        output_asset=vault_leg.principal_token,
        min_output=request.min_output,
        deadline=request.deadline,
    )


def plan_zap_out_and_swap_3crv(
    request: ZapOutRequest,
    base_output_index: int,
    base_leg: PoolLegDescriptor | None,
    pools: PoolDirectory,
) -> RoutePlan:
    """Zap out to the base LP, then withdraw one coin of the base basket.

    Only the final amount is held to ``min_output``.
    """
    if base_leg is None:
        raise InvalidRequest("No base pool configured for three-hop routes")
    pools.resolve(base_leg)
    pools.resolve(request.pool_leg)
    _check_zap_out(request)
    if request.output_asset != base_leg.lp_token:
        raise InvalidRequest(f"Output asset {request.output_asset} is not the base LP {base_leg.lp_token}")
    if not 0 <= base_output_index < base_leg.n_coins:
        raise InvalidRequest(f"Base output index {base_output_index} outside basket of {base_leg.n_coins}")

    vault_leg = request.vault_leg
    return RoutePlan(
        shape=RouteShape.ZAP_OUT_SWAP_3CRV,
        legs=(
            VaultSwapLeg(
                vault=vault_leg,
                asset_in=vault_leg.principal_token,
                asset_out=vault_leg.lp_token,
                amount_in=request.principal_amount_in,
            ),
            WithdrawLeg(
                pool=request.pool_leg,
                output_index=request.output_asset_index,
                index_is_uint256=request.index_is_uint256,
            ),
            WithdrawLeg(pool=base_leg, output_index=base_output_index),
        ),
        inputs=((vault_leg.principal_token, request.principal_amount_in),),
        output_asset=base_leg.basket_assets[base_output_index],
        min_output=request.min_output,
        deadline=request.deadline,
    )
