"""Curve stableswap math for the pool leg.

Mirrors the integer arithmetic of Curve's Vyper plain pools: balances are
lifted to 18 decimals through per-coin rates, the invariant D and a single
balance y are solved by Newton iteration, and deposits and single-coin
withdrawals charge the imbalance fee ``fee * N / (4 * (N - 1))``.

All subtraction goes through SafeInt, so an input that would make the pool
revert raises here as well.
"""

from dataclasses import dataclass

from zapper.constants import A_PRECISION, FEE_DENOMINATOR, PRECISION
from zapper.safe_int import S

from .errors import (
    BalanceDidNotConverge,
    InvariantDecreased,
    InvariantDidNotConverge,
    WithdrawExceedsSupply,
)

# Maximum iterations for Newton convergence
_MAX_ITERATIONS = 255


@dataclass(frozen=True)
class DepositQuote:
    """Outcome of a joint deposit.

    Attributes:
        mint_amount: LP tokens minted to the depositor
        balances: Pool balances after the deposit, net of the admin fee share
        fees: Imbalance fee charged per coin, in native decimals
    """

    mint_amount: int
    balances: tuple[int, ...]
    fees: tuple[int, ...]


@dataclass(frozen=True)
class WithdrawQuote:
    """Outcome of a single-coin withdrawal.

    Attributes:
        amount: Coins sent to the withdrawer, in native decimals
        fee: Fee charged on the withdrawal, in native decimals
        balances: Pool balances after the withdrawal, net of the admin fee share
    """

    amount: int
    fee: int
    balances: tuple[int, ...]


def default_rate(decimals: int) -> int:
    """Rate that lifts a coin with ``decimals`` to 18-decimal precision."""
    return 10 ** (36 - decimals)


def xp_of(balances: tuple[int, ...] | list[int], rates: tuple[int, ...] | list[int]) -> list[int]:
    """Normalize native balances to 18 decimals."""
    return [rate * balance // PRECISION for rate, balance in zip(rates, balances, strict=True)]


def get_d(xp: list[int], amp: int) -> int:
    """Solve the stableswap invariant D for normalized balances.

    Args:
        xp: Balances at 18 decimals
        amp: Amplification coefficient, already multiplied by A_PRECISION

    Returns:
        The invariant D

    Raises:
        InvariantDidNotConverge: If Newton iteration does not settle within 255 rounds
        SafeIntError: If a balance is zero while others are not
    """
    n_coins = len(xp)
    s = S(sum(xp))
    if s == 0:
        return 0

    d = s
    ann = S(amp) * n_coins
    for _ in range(_MAX_ITERATIONS):
        d_p = d
        for x in xp:
            d_p = d_p * d // (S(x) * n_coins)
        d_prev = d
        numerator = (ann * s // A_PRECISION + d_p * n_coins) * d
        denominator = (ann - A_PRECISION) * d // A_PRECISION + S(n_coins + 1) * d_p
        d = numerator // denominator
        if d.abs_diff(d_prev) <= 1:
            return d.value

    raise InvariantDidNotConverge(f"D did not converge after {_MAX_ITERATIONS} iterations")


def get_y_d(amp: int, i: int, xp: list[int], d: int) -> int:
    """Solve balance ``i`` so that the invariant equals ``d``.

    The other coins keep the balances in ``xp``.

    Raises:
        BalanceDidNotConverge: If Newton iteration does not settle within 255 rounds
        IndexError: If i is out of range
    """
    n_coins = len(xp)
    if i < 0 or i >= n_coins:
        raise IndexError(f"coin index {i} out of range for {n_coins} coins")

    d_ = S(d)
    ann = S(amp) * n_coins
    c = d_
    s_ = S(0)
    for j, x in enumerate(xp):
        if j == i:
            continue
        s_ = s_ + x
        c = c * d_ // (S(x) * n_coins)

    c = c * d_ * A_PRECISION // (ann * n_coins)
    b = s_ + d_ * A_PRECISION // ann

    y = d_
    for _ in range(_MAX_ITERATIONS):
        y_prev = y
        y = (y * y + c) // (y * 2 + b - d_)
        if y.abs_diff(y_prev) <= 1:
            return y.value

    raise BalanceDidNotConverge(f"y did not converge after {_MAX_ITERATIONS} iterations")


def _base_fee(fee: int, n_coins: int) -> int:
    return fee * n_coins // (4 * (n_coins - 1))


def calc_add_liquidity(
    balances: tuple[int, ...],
    rates: tuple[int, ...],
    amp: int,
    fee: int,
    admin_fee: int,
    total_supply: int,
    amounts: tuple[int, ...] | list[int],
) -> DepositQuote:
    """Price a joint deposit of ``amounts`` into a stableswap pool.

    Every coin is deposited at once. The imbalance fee is charged per coin on
    the distance between its new balance and the balance a proportional
    deposit would have produced.

    Raises:
        InvariantDecreased: If the deposit does not grow D (e.g. all amounts zero)
        ValueError: If amounts does not match the coin count
    """
    n_coins = len(balances)
    if len(amounts) != n_coins:
        raise ValueError(f"expected {n_coins} amounts, got {len(amounts)}")

    old_balances = list(balances)
    d0 = 0 if total_supply == 0 else get_d(xp_of(old_balances, rates), amp)

    new_balances = [old + amount for old, amount in zip(old_balances, amounts)]
    d1 = get_d(xp_of(new_balances, rates), amp)
    if d1 <= d0:
        raise InvariantDecreased(f"deposit does not increase D ({d0} -> {d1})")

    if total_supply == 0:
        return DepositQuote(
            mint_amount=d1,
            balances=tuple(new_balances),
            fees=tuple(0 for _ in range(n_coins)),
        )

    base_fee = _base_fee(fee, n_coins)
    stored_balances = []
    fees = []
    for j in range(n_coins):
        ideal_balance = d1 * old_balances[j] // d0
        difference = S(ideal_balance).abs_diff(new_balances[j])
        coin_fee = (S(base_fee) * difference // FEE_DENOMINATOR).value
        fees.append(coin_fee)
        stored_balances.append((S(new_balances[j]) - coin_fee * admin_fee // FEE_DENOMINATOR).value)
        new_balances[j] = (S(new_balances[j]) - coin_fee).value

    d2 = get_d(xp_of(new_balances, rates), amp)
    mint_amount = (S(total_supply) * (S(d2) - d0) // d0).value
    return DepositQuote(mint_amount=mint_amount, balances=tuple(stored_balances), fees=tuple(fees))


def calc_withdraw_one_coin(
    balances: tuple[int, ...],
    rates: tuple[int, ...],
    amp: int,
    fee: int,
    admin_fee: int,
    total_supply: int,
    lp_amount: int,
    i: int,
) -> WithdrawQuote:
    """Price burning ``lp_amount`` LP tokens for coin ``i`` alone.

    One wei is held back from the output to absorb rounding, as the pools do.

    Raises:
        WithdrawExceedsSupply: If lp_amount is zero or above the LP supply
        IndexError: If i is out of range
    """
    n_coins = len(balances)
    if i < 0 or i >= n_coins:
        raise IndexError(f"coin index {i} out of range for {n_coins} coins")
    if lp_amount <= 0 or lp_amount > total_supply:
        raise WithdrawExceedsSupply(f"cannot burn {lp_amount} of {total_supply} LP tokens")

    xp = xp_of(balances, rates)
    d0 = get_d(xp, amp)
    d1 = (S(d0) - S(lp_amount) * d0 // total_supply).value
    new_y = get_y_d(amp, i, xp, d1)

    base_fee = _base_fee(fee, n_coins)
    xp_reduced = []
    for j, xp_j in enumerate(xp):
        if j == i:
            dx_expected = S(xp_j) * d1 // d0 - new_y
        else:
            dx_expected = S(xp_j) - S(xp_j) * d1 // d0
        xp_reduced.append((S(xp_j) - S(base_fee) * dx_expected // FEE_DENOMINATOR).value)

    dy = S(xp_reduced[i]) - get_y_d(amp, i, xp_reduced, d1)
    dy_0 = (S(xp[i]) - new_y) * PRECISION // rates[i]
    dy = (dy - 1) * PRECISION // rates[i]
    dy_fee = (dy_0 - dy).value

    new_balances = list(balances)
    new_balances[i] = (S(new_balances[i]) - (dy + dy_fee * admin_fee // FEE_DENOMINATOR)).value
    return WithdrawQuote(amount=dy.value, fee=dy_fee, balances=tuple(new_balances))
