"""Zap router: executes the four route shapes as all-or-nothing calls.

Every route follows the same path:

    START -> PERMIT_APPLIED? -> LEG1 -> LEG2 [-> LEG3] -> SETTLED | REVERTED

Checks that need no external call (setup sealed, basket validity, deadline,
call value) run first. Permits run next, outside the atomic scope: their
allowance grant survives a failed route. Pulling the caller's inputs, the
legs and the delivery then run inside ``Chain.atomic()``, so a failure at
any leg leaves balances, allowances and pool reserves as they were.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from zapper.approvals import ApprovalRegistry
from zapper.chain.ledger import LedgerError
from zapper.chain.state import Chain
from zapper.config import DEFAULT_ZAP_CONFIG, ZapConfig
from zapper.constants import ETH_CONSTANT
from zapper.errors import (
    ApprovalSetupError,
    DeadlineExpired,
    EstimationInvalid,
    InvalidRequest,
    LegExecutionFailed,
    SlippageExceeded,
    ZapError,
)
from zapper.estimator import Estimator
from zapper.legs.permit import PermitAdapter
from zapper.legs.pool import LegOutcome, PoolLegAdapter
from zapper.legs.vault import VaultLegAdapter
from zapper.models.types import normalize_address
from zapper.models.zap import PermitAuthorization, PoolLegDescriptor, ZapInRequest, ZapOutRequest
from zapper.pools.registry import PoolDirectory
from zapper.pools.vault import BalancerVault
from zapper.routing.plan import (
    plan_swap_3crv_and_zap_in,
    plan_zap_in,
    plan_zap_out,
    plan_zap_out_and_swap_3crv,
)
from zapper.routing.types import (
    LEG_STATES,
    DepositLeg,
    Leg,
    RoutePlan,
    RouteState,
    VaultSwapLeg,
    WithdrawLeg,
    ZapResult,
)

logger = structlog.get_logger()


class ZapRouter:
    """Routes between basket assets and principal tokens.

    Args:
        address: The router's own address; it holds assets between legs
        chain: Ledger, clock and atomic scope
        pools: Stableswap pools the router may use
        vault: Vault holding the LP/principal weighted pools
        approvals: The router's standing allowances, sealed before routing
        base_pool_leg: Base basket pool used by the three-hop routes
        config: Router configuration
    """

    def __init__(
        self,
        address: str,
        chain: Chain,
        pools: PoolDirectory,
        vault: BalancerVault,
        approvals: ApprovalRegistry,
        *,
        base_pool_leg: PoolLegDescriptor | None = None,
        config: ZapConfig = DEFAULT_ZAP_CONFIG,
    ) -> None:
        self.address = normalize_address(address, validate=True)
        if approvals.router != self.address:
            raise ValueError(f"Approval registry manages {approvals.router}, not {self.address}")
        if chain.ledger.chain_id != config.chain_id:
            raise ValueError(
                f"Ledger chain id {chain.ledger.chain_id} differs from configured {config.chain_id}"
            )

        self.chain = chain
        self.pools = pools
        self.vault = vault
        self.approvals = approvals
        self.base_pool_leg = base_pool_leg
        self.config = config

        chain.register(vault)
        for pool in pools:
            chain.register(pool)

        self.permit_adapter = PermitAdapter(chain, self.address)
        self.pool_legs = PoolLegAdapter(pools, approvals, self.address)
        self.vault_legs = VaultLegAdapter(vault, approvals, self.address)
        self.estimator = Estimator(pools, vault, base_pool_leg=base_pool_leg)

    # Estimates

    def estimate_zap_in(self, request: ZapInRequest) -> int:
        return self.estimator.estimate_zap_in(request)

    def estimate_zap_out(self, request: ZapOutRequest) -> int:
        return self.estimator.estimate_zap_out(request)

    def estimate_swap_3crv_and_zap_in(self, request: ZapInRequest, base_amounts: Sequence[int]) -> int:
        return self.estimator.estimate_swap_3crv_and_zap_in(request, base_amounts)

    def estimate_zap_out_and_swap_3crv(self, request: ZapOutRequest, base_output_index: int) -> int:
        return self.estimator.estimate_zap_out_and_swap_3crv(request, base_output_index)

    # Routes

    def zap_in(
        self,
        request: ZapInRequest,
        permits: Sequence[PermitAuthorization] = (),
        *,
        sender: str,
        value: int = 0,
    ) -> ZapResult:
        """Deposit a basket and swap the LP tokens for principal tokens."""
        self._require_sealed()
        plan = plan_zap_in(request, self.pools)
        return self._execute(plan, permits, sender=sender, value=value)

    def zap_out(
        self,
        request: ZapOutRequest,
        permits: Sequence[PermitAuthorization] = (),
        *,
        sender: str,
    ) -> ZapResult:
        """Swap principal tokens for LP tokens and withdraw one basket asset."""
        self._require_sealed()
        plan = plan_zap_out(request, self.pools)
        return self._execute(plan, permits, sender=sender, value=0)

    def swap_3crv_and_zap_in(
        self,
        request: ZapInRequest,
        base_amounts: Sequence[int],
        permits: Sequence[PermitAuthorization] = (),
        *,
        sender: str,
        value: int = 0,
    ) -> ZapResult:
        """Deposit the base basket, fold its LP into the primary basket, then zap in."""
        self._require_sealed()
        plan = plan_swap_3crv_and_zap_in(request, base_amounts, self.base_pool_leg, self.pools)
        return self._execute(plan, permits, sender=sender, value=value)

    def zap_out_and_swap_3crv(
        self,
        request: ZapOutRequest,
        base_output_index: int,
        permits: Sequence[PermitAuthorization] = (),
        *,
        sender: str,
    ) -> ZapResult:
        """Zap out to the base LP token, then withdraw one base basket asset."""
        self._require_sealed()
        plan = plan_zap_out_and_swap_3crv(request, base_output_index, self.base_pool_leg, self.pools)
        return self._execute(plan, permits, sender=sender, value=0)

    def _require_sealed(self) -> None:
        if not self.approvals.is_sealed:
            raise ApprovalSetupError("Router setup is not finished: approvals are not sealed")

    def _execute(
        self,
        plan: RoutePlan,
        permits: Sequence[PermitAuthorization],
        *,
        sender: str,
        value: int,
    ) -> ZapResult:
        sender = normalize_address(sender)
        log = logger.bind(shape=plan.shape.value, sender=sender)
        states = [RouteState.START]

        now = self.chain.now()
        if now > plan.deadline:
            log.warning("zap_rejected", reason="deadline", deadline=plan.deadline, now=now)
            raise DeadlineExpired(f"Deadline {plan.deadline} passed at {now}")
        if value != plan.native_value:
            raise InvalidRequest(f"Call value {value} does not match native input {plan.native_value}")

        if permits:
            self.permit_adapter.apply(permits, sender)
            states.append(RouteState.PERMIT_APPLIED)

        limits = self._leg_limits(plan)
        leg_amounts: list[int] = []
        calls = []
        try:
            with self.chain.atomic():
                self._pull_inputs(plan, sender)
                carried: int | None = None
                for leg, limit, state in zip(plan.legs, limits, LEG_STATES):
                    outcome = self._run_leg(leg, carried, limit, plan.deadline)
                    carried = outcome.amount
                    leg_amounts.append(outcome.amount)
                    calls.append(outcome.call)
                    states.append(state)
                    log.debug(
                        "leg_executed", leg=leg.name, asset=leg.output_asset, amount=outcome.amount
                    )

                amount = carried or 0
                if amount < plan.min_output:
                    raise SlippageExceeded(
                        f"Delivered {amount} below minimum {plan.min_output}",
                        amount=amount,
                        minimum=plan.min_output,
                    )
                self._deliver(plan.output_asset, sender, amount)
        except ZapError as e:
            states.append(RouteState.REVERTED)
            log.warning(
                "zap_reverted",
                error=type(e).__name__,
                reason=str(e),
                states=[s.value for s in states],
            )
            raise

        states.append(RouteState.SETTLED)
        log.info("zap_settled", amount=amount, leg_amounts=leg_amounts)
        return ZapResult(
            shape=plan.shape,
            amount=amount,
            leg_amounts=tuple(leg_amounts),
            calls=tuple(calls),
            states=tuple(states),
        )

    def _leg_limits(self, plan: RoutePlan) -> list[int]:
        """Minimum output per leg: ``min_output`` on the last leg, zero or a floor before it.

        With ``intermediate_floor`` an earlier leg must reach the same fraction
        of its quoted amount as the final minimum is of the final quote.
        """
        limits = [0] * len(plan.legs)
        limits[-1] = plan.min_output
        if not plan.intermediate_floor or plan.min_output == 0:
            return limits
        try:
            quote = self.estimator.quote(plan)
        except EstimationInvalid as e:
            raise LegExecutionFailed(f"Cannot price {plan.shape.value}: {e}") from e
        if quote.amount == 0:
            return limits
        for i, leg_amount in enumerate(quote.leg_amounts[:-1]):
            limits[i] = leg_amount * plan.min_output // quote.amount
        return limits

    def _pull_inputs(self, plan: RoutePlan, sender: str) -> None:
        ledger = self.chain.ledger
        try:
            for asset, amount in plan.inputs:
                if asset == ETH_CONSTANT:
                    ledger.transfer(asset, sender, self.address, amount)
                else:
                    ledger.transfer_from(asset, self.address, sender, self.address, amount)
        except LedgerError as e:
            raise LegExecutionFailed(f"Cannot pull inputs from {sender}: {e}", leg="inputs") from e

    def _run_leg(self, leg: Leg, carried: int | None, limit: int, deadline: int) -> LegOutcome:
        if isinstance(leg, DepositLeg):
            return self.pool_legs.deposit(leg.pool, leg.basket_for(carried), limit)
        if isinstance(leg, WithdrawLeg):
            return self.pool_legs.withdraw_single(
                leg.pool,
                carried or 0,
                leg.output_index,
                limit,
                index_is_uint256=leg.index_is_uint256,
            )
        if isinstance(leg, VaultSwapLeg):
            amount_in = leg.amount_in if leg.amount_in is not None else carried or 0
            return self.vault_legs.swap(leg.vault, leg.asset_in, leg.asset_out, amount_in, limit, deadline)
        raise TypeError(f"Unknown leg {leg!r}")

    def _deliver(self, asset: str, recipient: str, amount: int) -> None:
        try:
            self.chain.ledger.transfer(asset, self.address, recipient, amount)
        except LedgerError as e:
            raise LegExecutionFailed(f"Cannot deliver {amount} of {asset}: {e}", leg="deliver") from e
