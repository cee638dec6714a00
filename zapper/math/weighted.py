"""Weighted product math for the vault leg.

The vault only ever performs exact-input swaps for a zap, so only the
out-given-in direction is implemented. Amounts enter in native token
decimals, are upscaled to 18 decimals, charged the swap fee on the way in,
and the result is downscaled rounding down.
"""

from decimal import Decimal

from zapper.math.errors import (
    InvalidFeeError,
    InvalidScalingFactorError,
    MaxInRatioError,
    ZeroBalanceError,
    ZeroWeightError,
)
from zapper.math.fixed_point import MAX_IN_RATIO, Bfp


def scaling_factor_for(decimals: int) -> int:
    """Return the factor that lifts a token with ``decimals`` to 18 decimals."""
    if decimals > 18:
        raise InvalidScalingFactorError(f"Tokens with {decimals} decimals are not supported")
    return 10 ** (18 - decimals)


def scale_up(amount: int, scaling_factor: int) -> Bfp:
    """Scale a native token amount to 18 decimals.

    Raises:
        InvalidScalingFactorError: If scaling_factor <= 0
    """
    if scaling_factor <= 0:
        raise InvalidScalingFactorError(f"Scaling factor must be positive, got {scaling_factor}")
    return Bfp.from_wei(amount * scaling_factor)


def scale_down_down(bfp: Bfp, scaling_factor: int) -> int:
    """Scale an 18-decimal amount back to native decimals, rounding down.

    Raises:
        InvalidScalingFactorError: If scaling_factor <= 0
    """
    if scaling_factor <= 0:
        raise InvalidScalingFactorError(f"Scaling factor must be positive, got {scaling_factor}")
    return bfp.value // scaling_factor


def subtract_swap_fee_amount(amount: int, swap_fee: Decimal) -> int:
    """Deduct the swap fee from an (upscaled) input amount.

    The fee portion is rounded up, so the amount that prices the swap is
    rounded down.

    Args:
        amount: Input amount before fee, 18 decimals
        swap_fee: Fee as decimal (e.g., 0.003 for 0.3%), must be in [0, 1)

    Returns:
        Amount after fee deduction

    Raises:
        InvalidFeeError: If swap_fee is not in range [0, 1)
    """
    if swap_fee < 0 or swap_fee >= 1:
        raise InvalidFeeError(f"Swap fee must be in range [0, 1), got {swap_fee}")
    amount_bfp = Bfp.from_wei(amount)
    fee_amount = amount_bfp.mul_up(Bfp.from_decimal(swap_fee))
    return amount_bfp.sub(fee_amount).value


def calc_out_given_in(
    balance_in: Bfp,
    weight_in: Bfp,
    balance_out: Bfp,
    weight_out: Bfp,
    amount_in: Bfp,
) -> Bfp:
    """Calculate output amount for a given input.

    Fee must already be subtracted from amount_in.

    Formula:
        amount_out = balance_out * (1 - (balance_in / (balance_in + amount_in))^(weight_in / weight_out))

    Args:
        balance_in: Scaled balance of input token (must be positive)
        weight_in: Weight of input token (must be positive)
        balance_out: Scaled balance of output token (must be positive)
        weight_out: Weight of output token (must be positive)
        amount_in: Scaled input amount (after fee subtraction)

    Returns:
        Scaled output amount

    Raises:
        MaxInRatioError: If amount_in > balance_in * 0.3
        ZeroWeightError: If weight_in or weight_out is zero
        ZeroBalanceError: If balance_in or balance_out is zero
    """
    if weight_in.value <= 0 or weight_out.value <= 0:
        raise ZeroWeightError("weights must be positive")
    if balance_in.value <= 0 or balance_out.value <= 0:
        raise ZeroBalanceError("balances must be positive")

    if amount_in.value > balance_in.mul_down(MAX_IN_RATIO).value:
        raise MaxInRatioError(f"Input {amount_in.value} exceeds 30% of balance {balance_in.value}")

    denominator = balance_in.add(amount_in)
    base = balance_in.div_up(denominator)
    exponent = weight_in.div_down(weight_out)
    power = base.pow_up(exponent)

    return balance_out.mul_down(power.complement())
