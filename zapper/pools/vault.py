"""Balancer-style vault holding weighted pools.

Pools are addressed by a 32-byte pool id. The vault owns every pool's
tokens on the ledger and settles a swap by pulling the input from the fund
sender through its allowance and paying the output to the recipient.

Revert reasons use Balancer's ``BAL#`` error codes.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from enum import IntEnum

import structlog

from zapper.chain.ledger import TokenLedger
from zapper.chain.state import Clock
from zapper.constants import BALANCER_VAULT
from zapper.math.errors import MathError, MaxInRatioError
from zapper.math.fixed_point import Bfp, LogExpMathError
from zapper.math.weighted import (
    calc_out_given_in,
    scale_down_down,
    scale_up,
    scaling_factor_for,
    subtract_swap_fee_amount,
)
from zapper.models.types import normalize_address

logger = structlog.get_logger()

# Balancer V2 error codes raised by the vault
INVALID_POOL_ID = "BAL#500"
SWAP_LIMIT = "BAL#507"
SWAP_DEADLINE = "BAL#508"
CANNOT_SWAP_SAME_TOKEN = "BAL#509"
UNKNOWN_AMOUNT_IN_FIRST_SWAP = "BAL#510"
TOKEN_NOT_REGISTERED = "BAL#521"
MAX_IN_RATIO = "BAL#304"


class VaultError(Exception):
    """Vault call reverted.

    Attributes:
        code: Balancer error code (e.g. "BAL#507"), or None
    """

    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(f"{code}: {message}" if code else message)
        self.code = code


class SwapKind(IntEnum):
    GIVEN_IN = 0
    GIVEN_OUT = 1


@dataclass(frozen=True)
class WeightedTokenReserve:
    """Reserve information for a token in a weighted pool.

    Attributes:
        token: Token address
        balance: Balance in the token's native decimals
        weight: Normalized weight (weights in a pool sum to 1.0)
        scaling_factor: 10^(18 - decimals)
    """

    token: str
    balance: int
    weight: Decimal
    scaling_factor: int


@dataclass(frozen=True)
class WeightedPoolState:
    """Weighted pool as seen by the pricing math.

    Attributes:
        pool_id: 32-byte pool id
        reserves: Token reserves in registration order
        swap_fee: Swap fee as decimal (e.g., 0.003 for 0.3%)
    """

    pool_id: str
    reserves: tuple[WeightedTokenReserve, ...]
    swap_fee: Decimal

    def get_reserve(self, token: str) -> WeightedTokenReserve | None:
        """Get reserve for a specific token."""
        token_lower = token.lower()
        for reserve in self.reserves:
            if reserve.token == token_lower:
                return reserve
        return None


@dataclass(frozen=True)
class SingleSwap:
    pool_id: str
    asset_in: str
    asset_out: str
    amount: int
    kind: SwapKind = SwapKind.GIVEN_IN
    user_data: bytes = b""


@dataclass(frozen=True)
class FundManagement:
    sender: str
    recipient: str
    from_internal_balance: bool = False
    to_internal_balance: bool = False


def weighted_swap_out(state: WeightedPoolState, token_in: str, token_out: str, amount_in: int) -> int:
    """Amount of ``token_out`` a GIVEN_IN swap of ``amount_in`` pays, in native decimals.

    Raises:
        KeyError: If either token is not in the pool
        MathError: If the weighted math rejects the swap (e.g. above 30% of balance)
        LogExpMathError: If the power function leaves its supported range
    """
    reserve_in = state.get_reserve(token_in)
    reserve_out = state.get_reserve(token_out)
    if reserve_in is None or reserve_out is None:
        raise KeyError(f"{token_in} or {token_out} not in pool {state.pool_id}")

    balance_in = scale_up(reserve_in.balance, reserve_in.scaling_factor)
    balance_out = scale_up(reserve_out.balance, reserve_out.scaling_factor)
    amount_in_scaled = scale_up(amount_in, reserve_in.scaling_factor)

    amount_in_after_fee = subtract_swap_fee_amount(amount_in_scaled.value, state.swap_fee)

    amount_out_scaled = calc_out_given_in(
        balance_in=balance_in,
        weight_in=Bfp.from_decimal(reserve_in.weight),
        balance_out=balance_out,
        weight_out=Bfp.from_decimal(reserve_out.weight),
        amount_in=Bfp(amount_in_after_fee),
    )
    return scale_down_down(amount_out_scaled, reserve_out.scaling_factor)


class BalancerVault:
    """Vault that custodies weighted pools and executes single swaps."""

    def __init__(self, ledger: TokenLedger, clock: Clock, address: str = BALANCER_VAULT) -> None:
        self.ledger = ledger
        self.clock = clock
        self.address = normalize_address(address, validate=True)
        self._pools: dict[str, WeightedPoolState] = {}

    def register_pool(
        self,
        pool_id: str,
        tokens: list[str],
        weights: list[Decimal],
        swap_fee: Decimal,
    ) -> WeightedPoolState:
        """Register an empty weighted pool under ``pool_id``."""
        pool_id = pool_id.lower()
        if pool_id in self._pools:
            raise VaultError(f"Pool {pool_id} already registered")
        if len(tokens) != len(weights):
            raise ValueError("tokens and weights must have the same length")
        if sum(weights) != 1:
            raise ValueError(f"Weights must sum to 1, got {sum(weights)}")
        reserves = tuple(
            WeightedTokenReserve(
                token=normalize_address(token),
                balance=0,
                weight=weight,
                scaling_factor=scaling_factor_for(self.ledger.decimals(token)),
            )
            for token, weight in zip(tokens, weights)
        )
        state = WeightedPoolState(pool_id=pool_id, reserves=reserves, swap_fee=swap_fee)
        self._pools[pool_id] = state
        return state

    def join_pool(self, pool_id: str, sender: str, amounts: list[int]) -> None:
        """Add ``amounts`` (in reserve order) to a pool, pulled from ``sender``."""
        state = self.pool_state(pool_id)
        if len(amounts) != len(state.reserves):
            raise VaultError(f"Expected {len(state.reserves)} amounts, got {len(amounts)}")
        reserves = []
        for reserve, amount in zip(state.reserves, amounts):
            if amount:
                self.ledger.transfer_from(reserve.token, self.address, sender, self.address, amount)
            reserves.append(replace(reserve, balance=reserve.balance + amount))
        self._pools[state.pool_id] = replace(state, reserves=tuple(reserves))

    def pool_state(self, pool_id: str) -> WeightedPoolState:
        state = self._pools.get(pool_id.lower())
        if state is None:
            raise VaultError(f"Unknown pool {pool_id}", code=INVALID_POOL_ID)
        return state

    def swap(
        self,
        single_swap: SingleSwap,
        funds: FundManagement,
        limit: int,
        deadline: int,
    ) -> int:
        """Execute a GIVEN_IN swap and return the amount paid out.

        Raises:
            VaultError: BAL#508 past deadline, BAL#507 below limit, or any other
                revert of the pool or its math
        """
        now = self.clock.now()
        if now > deadline:
            raise VaultError(f"deadline {deadline} passed at {now}", code=SWAP_DEADLINE)
        if single_swap.kind != SwapKind.GIVEN_IN:
            raise VaultError("only GIVEN_IN swaps are supported")
        if single_swap.amount == 0:
            raise VaultError("zero swap amount", code=UNKNOWN_AMOUNT_IN_FIRST_SWAP)

        asset_in = normalize_address(single_swap.asset_in)
        asset_out = normalize_address(single_swap.asset_out)
        if asset_in == asset_out:
            raise VaultError("same token in and out", code=CANNOT_SWAP_SAME_TOKEN)

        state = self.pool_state(single_swap.pool_id)
        try:
            amount_out = weighted_swap_out(state, asset_in, asset_out, single_swap.amount)
        except KeyError as e:
            raise VaultError(str(e), code=TOKEN_NOT_REGISTERED) from e
        except MaxInRatioError as e:
            raise VaultError(str(e), code=MAX_IN_RATIO) from e
        except (MathError, LogExpMathError, ZeroDivisionError) as e:
            raise VaultError(f"swap math failed: {e}") from e

        if amount_out < limit:
            raise VaultError(f"amount out {amount_out} below limit {limit}", code=SWAP_LIMIT)

        self.ledger.transfer_from(asset_in, self.address, funds.sender, self.address, single_swap.amount)
        self.ledger.transfer(asset_out, self.address, funds.recipient, amount_out)

        reserves = []
        for reserve in state.reserves:
            if reserve.token == asset_in:
                reserve = replace(reserve, balance=reserve.balance + single_swap.amount)
            elif reserve.token == asset_out:
                reserve = replace(reserve, balance=reserve.balance - amount_out)
            reserves.append(reserve)
        self._pools[state.pool_id] = replace(state, reserves=tuple(reserves))

        logger.debug(
            "vault_swap",
            pool_id=state.pool_id,
            token_in=asset_in,
            token_out=asset_out,
            amount_in=single_swap.amount,
            amount_out=amount_out,
        )
        return amount_out

    def snapshot(self) -> dict[str, WeightedPoolState]:
        return dict(self._pools)

    def restore(self, snapshot: dict[str, WeightedPoolState]) -> None:
        self._pools = dict(snapshot)
