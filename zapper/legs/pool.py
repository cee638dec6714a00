"""Stableswap pool leg: joint basket deposit and single-coin withdrawal."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from zapper.approvals import ApprovalRegistry
from zapper.chain.ledger import LedgerError
from zapper.constants import ETH_CONSTANT
from zapper.encoding import LegCall, encode_add_liquidity, encode_remove_liquidity_one_coin
from zapper.errors import InvalidBasket, InvalidRequest, LegExecutionFailed, SlippageExceeded
from zapper.models.types import normalize_address
from zapper.models.zap import PoolLegDescriptor
from zapper.pools.curve import PoolError
from zapper.pools.registry import PoolDirectory

logger = structlog.get_logger()


@dataclass(frozen=True)
class LegOutcome:
    """Amount a leg produced and the call it made."""

    amount: int
    call: LegCall


class PoolLegAdapter:
    """Runs deposit and withdraw legs against registered stableswap pools.

    Amounts pass through in each coin's native decimals; the pool does its
    own normalization.
    """

    def __init__(self, pools: PoolDirectory, approvals: ApprovalRegistry, router: str) -> None:
        self.pools = pools
        self.approvals = approvals
        self.router = normalize_address(router)

    def deposit(
        self,
        descriptor: PoolLegDescriptor,
        basket_amounts: Sequence[int],
        min_mint: int = 0,
    ) -> LegOutcome:
        """Deposit the whole basket at once and return the LP minted to the router.

        Raises:
            InvalidBasket: If the vector length differs from the pool's coin count
            SlippageExceeded: If the pool would mint less than ``min_mint``
            LegExecutionFailed: If the pool call reverts for any other reason
        """
        pool = self.pools.resolve(descriptor)
        amounts = tuple(basket_amounts)
        if len(amounts) != len(pool.coins):
            raise InvalidBasket(f"Pool {pool.address} takes {len(pool.coins)} amounts, got {len(amounts)}")

        value = 0
        for coin, amount in zip(pool.coins, amounts):
            if amount == 0:
                continue
            if coin == ETH_CONSTANT:
                value += amount
            else:
                self.approvals.require(coin, pool.address, amount)

        call = encode_add_liquidity(pool.address, amounts, min_mint, value)
        try:
            minted = pool.add_liquidity(amounts, min_mint, sender=self.router, value=value)
        except PoolError as e:
            if e.slippage:
                raise SlippageExceeded(f"Deposit into {pool.address}: {e}", minimum=min_mint) from e
            raise LegExecutionFailed(f"Deposit into {pool.address} failed: {e}", leg="deposit") from e
        except LedgerError as e:
            raise LegExecutionFailed(f"Deposit into {pool.address} failed: {e}", leg="deposit") from e

        logger.debug("pool_leg_deposit", pool=pool.address, amounts=list(amounts), minted=minted)
        return LegOutcome(amount=minted, call=call)

    def withdraw_single(
        self,
        descriptor: PoolLegDescriptor,
        lp_amount: int,
        output_index: int,
        min_amount: int = 0,
        *,
        index_is_uint256: bool = False,
    ) -> LegOutcome:
        """Burn ``lp_amount`` of the router's LP tokens for one basket coin.

        Raises:
            InvalidRequest: If output_index is outside the basket
            SlippageExceeded: If the pool would pay less than ``min_amount``
            LegExecutionFailed: If the pool call reverts for any other reason
        """
        pool = self.pools.resolve(descriptor)
        if not 0 <= output_index < len(pool.coins):
            raise InvalidRequest(f"Coin index {output_index} outside pool {pool.address}")

        call = encode_remove_liquidity_one_coin(
            pool.address, lp_amount, output_index, min_amount, index_is_uint256=index_is_uint256
        )
        try:
            amount = pool.remove_liquidity_one_coin(
                lp_amount, output_index, min_amount, sender=self.router
            )
        except PoolError as e:
            if e.slippage:
                raise SlippageExceeded(f"Withdraw from {pool.address}: {e}", minimum=min_amount) from e
            raise LegExecutionFailed(
                f"Withdraw from {pool.address} failed: {e}", leg="withdraw_single"
            ) from e
        except LedgerError as e:
            raise LegExecutionFailed(
                f"Withdraw from {pool.address} failed: {e}", leg="withdraw_single"
            ) from e

        logger.debug("pool_leg_withdraw", pool=pool.address, burned=lp_amount, amount=amount)
        return LegOutcome(amount=amount, call=call)
