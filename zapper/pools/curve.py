"""Curve stableswap pool.

A plain pool of 2 or 3 coins in fixed order, one of which may be the native
currency. Deposits pull ERC-20 coins from the sender through its allowance
and take native currency as call value; LP tokens are minted and burned on
the shared ledger.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from zapper.chain.ledger import TokenLedger
from zapper.constants import ETH_CONSTANT
from zapper.math.errors import MathError
from zapper.math.stableswap import (
    DepositQuote,
    WithdrawQuote,
    calc_add_liquidity,
    calc_withdraw_one_coin,
    default_rate,
)
from zapper.models.types import normalize_address
from zapper.safe_int import SafeIntError

logger = structlog.get_logger()

# Curve's default admin fee: half of every trading fee
DEFAULT_ADMIN_FEE = 5_000_000_000


class PoolError(Exception):
    """Stableswap pool call reverted.

    Attributes:
        slippage: True when the revert is the pool's own minimum-amount check
    """

    def __init__(self, message: str, *, slippage: bool = False):
        super().__init__(message)
        self.slippage = slippage


@dataclass(frozen=True)
class StableswapPoolState:
    """Read-only view of a pool's pricing inputs.

    Attributes:
        address: Pool contract address
        coins: Basket in the pool's fixed order
        lp_token: LP token address
        balances: Coin balances in native decimals
        rates: Per-coin multipliers to 18 decimals, scaled by 1e18
        amp: Amplification coefficient times A_PRECISION
        fee: Trading fee over FEE_DENOMINATOR
        admin_fee: Share of fees kept by the admin, over FEE_DENOMINATOR
        lp_supply: LP token total supply
    """

    address: str
    coins: tuple[str, ...]
    lp_token: str
    balances: tuple[int, ...]
    rates: tuple[int, ...]
    amp: int
    fee: int
    admin_fee: int
    lp_supply: int

    @property
    def n_coins(self) -> int:
        return len(self.coins)

    def quote_add_liquidity(self, amounts: tuple[int, ...] | list[int]) -> DepositQuote:
        return calc_add_liquidity(
            self.balances,
            self.rates,
            self.amp,
            self.fee,
            self.admin_fee,
            self.lp_supply,
            amounts,
        )

    def quote_withdraw_one_coin(self, lp_amount: int, i: int) -> WithdrawQuote:
        return calc_withdraw_one_coin(
            self.balances,
            self.rates,
            self.amp,
            self.fee,
            self.admin_fee,
            self.lp_supply,
            lp_amount,
            i,
        )


class CurveStableswapPool:
    """Live stableswap pool bound to a token ledger."""

    def __init__(
        self,
        ledger: TokenLedger,
        address: str,
        coins: list[str] | tuple[str, ...],
        lp_token: str,
        *,
        amp: int,
        fee: int,
        admin_fee: int = DEFAULT_ADMIN_FEE,
        rates: tuple[int, ...] | None = None,
    ) -> None:
        if len(coins) not in (2, 3):
            raise ValueError(f"Stableswap pools hold 2 or 3 coins, got {len(coins)}")
        self.ledger = ledger
        self.address = normalize_address(address, validate=True)
        self.coins = tuple(normalize_address(c, validate=True) for c in coins)
        self.lp_token = normalize_address(lp_token, validate=True)
        self.amp = amp
        self.fee = fee
        self.admin_fee = admin_fee
        self.rates = rates or tuple(default_rate(ledger.decimals(c)) for c in self.coins)
        self._balances = [0] * len(self.coins)
        # Fail early if the LP token is not on the ledger
        ledger.token(self.lp_token)

    @property
    def state(self) -> StableswapPoolState:
        return StableswapPoolState(
            address=self.address,
            coins=self.coins,
            lp_token=self.lp_token,
            balances=tuple(self._balances),
            rates=self.rates,
            amp=self.amp,
            fee=self.fee,
            admin_fee=self.admin_fee,
            lp_supply=self.ledger.total_supply(self.lp_token),
        )

    def balances(self, i: int) -> int:
        return self._balances[i]

    def add_liquidity(
        self,
        amounts: list[int] | tuple[int, ...],
        min_mint_amount: int,
        *,
        sender: str,
        value: int = 0,
    ) -> int:
        """Deposit ``amounts`` jointly and mint LP tokens to ``sender``.

        Raises:
            PoolError: On a bad amount vector, mismatched call value, pricing
                failure, or when fewer than ``min_mint_amount`` LP would be minted
        """
        if len(amounts) != len(self.coins):
            raise PoolError(f"Expected {len(self.coins)} amounts, got {len(amounts)}")

        native_amount = sum(a for c, a in zip(self.coins, amounts) if c == ETH_CONSTANT)
        if value != native_amount:
            raise PoolError(f"Call value {value} does not match native amount {native_amount}")

        try:
            quote = self.state.quote_add_liquidity(amounts)
        except (MathError, SafeIntError) as e:
            raise PoolError(f"add_liquidity reverted: {e}") from e

        if quote.mint_amount < min_mint_amount:
            raise PoolError("Slippage screwed you", slippage=True)

        for coin, amount in zip(self.coins, amounts):
            if amount == 0:
                continue
            if coin == ETH_CONSTANT:
                self.ledger.transfer(coin, sender, self.address, amount)
            else:
                self.ledger.transfer_from(coin, self.address, sender, self.address, amount)

        self._balances = list(quote.balances)
        self.ledger.mint(self.lp_token, sender, quote.mint_amount)
        logger.debug(
            "curve_add_liquidity",
            pool=self.address,
            amounts=list(amounts),
            minted=quote.mint_amount,
            fees=list(quote.fees),
        )
        return quote.mint_amount

    def calc_token_amount(self, amounts: list[int] | tuple[int, ...]) -> int:
        """LP tokens a deposit of ``amounts`` mints at current state, fees included."""
        return self.state.quote_add_liquidity(amounts).mint_amount

    def calc_withdraw_one_coin(self, lp_amount: int, i: int) -> int:
        return self.state.quote_withdraw_one_coin(lp_amount, i).amount

    def remove_liquidity_one_coin(
        self,
        lp_amount: int,
        i: int,
        min_amount: int,
        *,
        sender: str,
    ) -> int:
        """Burn ``lp_amount`` of ``sender``'s LP tokens for coin ``i``.

        Raises:
            PoolError: On a bad index, pricing failure, or when fewer than
                ``min_amount`` coins would be sent
        """
        try:
            quote = self.state.quote_withdraw_one_coin(lp_amount, i)
        except (MathError, SafeIntError, IndexError) as e:
            raise PoolError(f"remove_liquidity_one_coin reverted: {e}") from e

        if quote.amount < min_amount:
            raise PoolError("Not enough coins removed", slippage=True)

        self.ledger.burn(self.lp_token, sender, lp_amount)
        self._balances = list(quote.balances)
        self.ledger.transfer(self.coins[i], self.address, sender, quote.amount)
        logger.debug(
            "curve_remove_liquidity_one_coin",
            pool=self.address,
            burned=lp_amount,
            coin=self.coins[i],
            amount=quote.amount,
            fee=quote.fee,
        )
        return quote.amount

    def snapshot(self) -> list[int]:
        return list(self._balances)

    def restore(self, snapshot: list[int]) -> None:
        self._balances = list(snapshot)
