"""Route shapes, leg plans and results.

A route is one of four closed shapes. Each shape maps to an ordered tuple
of leg operations (a RoutePlan); the estimator and the router both walk the
same plan, leg by leg, feeding each leg the previous leg's output.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from zapper.constants import ETH_CONSTANT
from zapper.encoding import LegCall
from zapper.models.zap import PoolLegDescriptor, VaultLegDescriptor


class RouteShape(str, Enum):
    """The supported route shapes."""

    ZAP_IN = "zap_in"
    ZAP_OUT = "zap_out"
    SWAP_3CRV_ZAP_IN = "swap_3crv_zap_in"
    ZAP_OUT_SWAP_3CRV = "zap_out_swap_3crv"


class RouteState(str, Enum):
    """States a route passes through while executing."""

    START = "start"
    PERMIT_APPLIED = "permit_applied"
    LEG1_EXECUTED = "leg1_executed"
    LEG2_EXECUTED = "leg2_executed"
    LEG3_EXECUTED = "leg3_executed"
    SETTLED = "settled"
    REVERTED = "reverted"


LEG_STATES = (RouteState.LEG1_EXECUTED, RouteState.LEG2_EXECUTED, RouteState.LEG3_EXECUTED)


@dataclass(frozen=True)
class DepositLeg:
    """Joint deposit of a basket into a stableswap pool.

    Attributes:
        pool: Pool descriptor
        amounts: Basket amounts in pool order
        carry_index: If set, the previous leg's output is added to this basket position
    """

    pool: PoolLegDescriptor
    amounts: tuple[int, ...]
    carry_index: int | None = None

    name = "deposit"

    def basket_for(self, carried: int | None) -> tuple[int, ...]:
        if self.carry_index is None or carried is None:
            return self.amounts
        amounts = list(self.amounts)
        amounts[self.carry_index] += carried
        return tuple(amounts)

    @property
    def output_asset(self) -> str:
        return self.pool.lp_token


@dataclass(frozen=True)
class WithdrawLeg:
    """Burn the previous leg's LP output for one basket coin."""

    pool: PoolLegDescriptor
    output_index: int
    index_is_uint256: bool = False

    name = "withdraw_single"

    @property
    def output_asset(self) -> str:
        return self.pool.basket_assets[self.output_index]


@dataclass(frozen=True)
class VaultSwapLeg:
    """GIVEN_IN vault swap.

    Attributes:
        vault: Vault leg descriptor
        asset_in: Token sold
        asset_out: Token bought
        amount_in: Fixed input, or None to take the previous leg's output
    """

    vault: VaultLegDescriptor
    asset_in: str
    asset_out: str
    amount_in: int | None = None

    name = "vault_swap"

    @property
    def output_asset(self) -> str:
        return self.asset_out


Leg = DepositLeg | WithdrawLeg | VaultSwapLeg


@dataclass(frozen=True)
class RoutePlan:
    """Ordered legs of one route plus the caller-side terms.

    Attributes:
        shape: Route shape
        legs: Leg operations in execution order
        inputs: (asset, amount) pairs pulled from the caller before the first leg
        output_asset: Asset delivered to the caller
        min_output: Minimum delivered amount
        deadline: Latest timestamp the route may execute at
        intermediate_floor: Give intermediate legs a floor proportional to
            min_output instead of zero
    """

    shape: RouteShape
    legs: tuple[Leg, ...]
    inputs: tuple[tuple[str, int], ...]
    output_asset: str
    min_output: int
    deadline: int
    intermediate_floor: bool = False

    @property
    def native_value(self) -> int:
        return sum(amount for asset, amount in self.inputs if asset == ETH_CONSTANT)


@dataclass(frozen=True)
class RouteQuote:
    """Expected amount after every leg of a plan."""

    shape: RouteShape
    leg_amounts: tuple[int, ...]

    @property
    def amount(self) -> int:
        return self.leg_amounts[-1]


@dataclass(frozen=True)
class ZapResult:
    """A settled route.

    Attributes:
        shape: Route shape
        amount: Amount delivered to the caller
        leg_amounts: Output of every leg in execution order
        calls: Encoded external call of every leg
        states: States the route passed through, ending in SETTLED
    """

    shape: RouteShape
    amount: int
    leg_amounts: tuple[int, ...]
    calls: tuple[LegCall, ...]
    states: tuple[RouteState, ...]
