"""Tests for the live stableswap pool."""

import pytest

from zapper.chain.ledger import InsufficientAllowance, InsufficientBalance, TokenLedger, UnknownToken
from zapper.constants import A_PRECISION
from zapper.pools.curve import CurveStableswapPool, PoolError
from tests.helpers import (
    DAI,
    ETH_CONSTANT,
    LIQUIDITY_PROVIDER,
    STECRV,
    STECRV_POOL,
    STETH,
    THREE_CRV,
    THREE_CRV_POOL,
    USDC,
    USDT,
    USER,
    units,
)


def make_three_pool(ledger: TokenLedger, seed: int = 1_000_000) -> CurveStableswapPool:
    """3pool seeded by LIQUIDITY_PROVIDER with ``seed`` of each coin."""
    pool = CurveStableswapPool(
        ledger, THREE_CRV_POOL, [DAI, USDC, USDT], THREE_CRV, amp=2000 * A_PRECISION, fee=1_000_000
    )
    amounts = [units(seed, DAI), units(seed, USDC), units(seed, USDT)]
    for coin, amount in zip(pool.coins, amounts):
        ledger.mint(coin, LIQUIDITY_PROVIDER, amount)
        ledger.approve(coin, LIQUIDITY_PROVIDER, pool.address, amount)
    pool.add_liquidity(amounts, 0, sender=LIQUIDITY_PROVIDER)
    return pool


def fund_user(ledger: TokenLedger, pool: CurveStableswapPool, amounts: list[int]) -> None:
    for coin, amount in zip(pool.coins, amounts):
        ledger.mint(coin, USER, amount)
        ledger.approve(coin, USER, pool.address, amount)


class TestConstruction:
    def test_requires_registered_lp_token(self, ledger: TokenLedger):
        with pytest.raises(UnknownToken):
            CurveStableswapPool(
                ledger, THREE_CRV_POOL, [DAI, USDC], "0x" + "99" * 20, amp=100, fee=0
            )

    def test_rejects_single_coin(self, ledger: TokenLedger):
        with pytest.raises(ValueError):
            CurveStableswapPool(ledger, THREE_CRV_POOL, [DAI], THREE_CRV, amp=100, fee=0)

    def test_rates_follow_decimals(self, ledger: TokenLedger):
        pool = make_three_pool(ledger)
        assert pool.rates == (10**18, 10**30, 10**30)


class TestAddLiquidity:
    def test_first_deposit_mints_invariant(self, ledger: TokenLedger):
        make_three_pool(ledger)
        assert ledger.balance_of(THREE_CRV, LIQUIDITY_PROVIDER) == units(3_000_000, THREE_CRV)

    def test_deposit_matches_calc_token_amount(self, ledger: TokenLedger):
        pool = make_three_pool(ledger)
        amounts = [units(5000, DAI), 0, units(100, USDT)]
        fund_user(ledger, pool, amounts)
        expected = pool.calc_token_amount(amounts)
        minted = pool.add_liquidity(amounts, expected, sender=USER)
        assert minted == expected
        assert ledger.balance_of(THREE_CRV, USER) == minted
        assert ledger.balance_of(DAI, USER) == 0
        assert pool.balances(0) < units(1_005_000, DAI)

    def test_min_mint_enforced(self, ledger: TokenLedger):
        pool = make_three_pool(ledger)
        amounts = [units(5000, DAI), 0, 0]
        fund_user(ledger, pool, amounts)
        expected = pool.calc_token_amount(amounts)
        with pytest.raises(PoolError) as exc_info:
            pool.add_liquidity(amounts, expected + 1, sender=USER)
        assert exc_info.value.slippage
        assert ledger.balance_of(DAI, USER) == amounts[0]
        assert pool.balances(0) == units(1_000_000, DAI)

    def test_wrong_amount_count(self, ledger: TokenLedger):
        pool = make_three_pool(ledger)
        with pytest.raises(PoolError) as exc_info:
            pool.add_liquidity([1, 2], 0, sender=USER)
        assert not exc_info.value.slippage

    def test_all_zero_deposit_reverts(self, ledger: TokenLedger):
        pool = make_three_pool(ledger)
        with pytest.raises(PoolError):
            pool.add_liquidity([0, 0, 0], 0, sender=USER)

    def test_deposit_without_allowance(self, ledger: TokenLedger):
        pool = make_three_pool(ledger)
        ledger.mint(DAI, USER, units(10, DAI))
        with pytest.raises(InsufficientAllowance):
            pool.add_liquidity([units(10, DAI), 0, 0], 0, sender=USER)

    def test_native_coin_needs_matching_value(self, ledger: TokenLedger):
        pool = CurveStableswapPool(
            ledger, STECRV_POOL, [ETH_CONSTANT, STETH], STECRV, amp=50 * A_PRECISION, fee=4_000_000
        )
        ledger.mint(ETH_CONSTANT, USER, units(2, ETH_CONSTANT))
        ledger.mint(STETH, USER, units(1, STETH))
        ledger.approve(STETH, USER, pool.address, units(1, STETH))
        amounts = [units(1, ETH_CONSTANT), units(1, STETH)]
        with pytest.raises(PoolError):
            pool.add_liquidity(amounts, 0, sender=USER, value=0)

        minted = pool.add_liquidity(amounts, 0, sender=USER, value=units(1, ETH_CONSTANT))
        assert minted == units(2, STECRV)
        assert ledger.balance_of(ETH_CONSTANT, USER) == units(1, ETH_CONSTANT)
        assert ledger.balance_of(ETH_CONSTANT, pool.address) == units(1, ETH_CONSTANT)


class TestRemoveLiquidityOneCoin:
    def test_withdraw_matches_calc(self, ledger: TokenLedger):
        pool = make_three_pool(ledger)
        lp_amount = units(1000, THREE_CRV)
        ledger.transfer(THREE_CRV, LIQUIDITY_PROVIDER, USER, lp_amount)
        expected = pool.calc_withdraw_one_coin(lp_amount, 1)
        received = pool.remove_liquidity_one_coin(lp_amount, 1, expected, sender=USER)
        assert received == expected
        assert ledger.balance_of(USDC, USER) == expected
        assert ledger.balance_of(THREE_CRV, USER) == 0
        assert units(999, USDC) < expected < units(1000, USDC)

    def test_min_amount_enforced(self, ledger: TokenLedger):
        pool = make_three_pool(ledger)
        lp_amount = units(1000, THREE_CRV)
        ledger.transfer(THREE_CRV, LIQUIDITY_PROVIDER, USER, lp_amount)
        expected = pool.calc_withdraw_one_coin(lp_amount, 0)
        with pytest.raises(PoolError) as exc_info:
            pool.remove_liquidity_one_coin(lp_amount, 0, expected + 1, sender=USER)
        assert exc_info.value.slippage
        assert ledger.balance_of(THREE_CRV, USER) == lp_amount

    def test_bad_index(self, ledger: TokenLedger):
        pool = make_three_pool(ledger)
        with pytest.raises(PoolError):
            pool.remove_liquidity_one_coin(1, 3, 0, sender=LIQUIDITY_PROVIDER)

    def test_burn_above_holder_balance(self, ledger: TokenLedger):
        pool = make_three_pool(ledger)
        with pytest.raises(InsufficientBalance):
            pool.remove_liquidity_one_coin(units(1, THREE_CRV), 0, 0, sender=USER)


class TestSnapshot:
    def test_restore_balances(self, ledger: TokenLedger):
        pool = make_three_pool(ledger)
        snap = pool.snapshot()
        ledger.transfer(THREE_CRV, LIQUIDITY_PROVIDER, USER, units(10, THREE_CRV))
        pool.remove_liquidity_one_coin(units(10, THREE_CRV), 0, 0, sender=USER)
        assert pool.balances(0) < units(1_000_000, DAI)
        pool.restore(snap)
        assert pool.balances(0) == units(1_000_000, DAI)

    def test_state_reports_lp_supply(self, ledger: TokenLedger):
        pool = make_three_pool(ledger)
        state = pool.state
        assert state.lp_supply == units(3_000_000, THREE_CRV)
        assert state.n_coins == 3
