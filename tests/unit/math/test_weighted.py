"""Tests for weighted-pool out-given-in math."""

from decimal import Decimal

import pytest

from zapper.math.errors import (
    InvalidFeeError,
    InvalidScalingFactorError,
    MaxInRatioError,
    ZeroBalanceError,
    ZeroWeightError,
)
from zapper.math.fixed_point import ONE_18, Bfp
from zapper.math.weighted import (
    calc_out_given_in,
    scale_down_down,
    scale_up,
    scaling_factor_for,
    subtract_swap_fee_amount,
)

HALF = Bfp(ONE_18 // 2)


class TestScaling:
    def test_scaling_factor_for_six_decimals(self):
        assert scaling_factor_for(6) == 10**12

    def test_scaling_factor_for_eighteen_decimals(self):
        assert scaling_factor_for(18) == 1

    def test_more_than_eighteen_decimals_rejected(self):
        with pytest.raises(InvalidScalingFactorError):
            scaling_factor_for(24)

    def test_scale_up(self):
        assert scale_up(1_000_000, 10**12).value == ONE_18

    def test_scale_down_rounds_down(self):
        assert scale_down_down(Bfp(1_999_999_999_999), 10**12) == 1

    def test_non_positive_scaling_factor_rejected(self):
        with pytest.raises(InvalidScalingFactorError):
            scale_up(1, 0)
        with pytest.raises(InvalidScalingFactorError):
            scale_down_down(Bfp(1), -1)


class TestSwapFee:
    def test_fee_is_subtracted(self):
        assert subtract_swap_fee_amount(ONE_18, Decimal("0.003")) == 997 * 10**15

    def test_fee_rounds_against_the_swapper(self):
        # 0.3% of 1 wei rounds up to a whole wei
        assert subtract_swap_fee_amount(1, Decimal("0.003")) == 0

    def test_zero_fee(self):
        assert subtract_swap_fee_amount(12345, Decimal("0")) == 12345

    @pytest.mark.parametrize("fee", [Decimal("-0.01"), Decimal("1"), Decimal("1.5")])
    def test_invalid_fee_rejected(self, fee):
        with pytest.raises(InvalidFeeError):
            subtract_swap_fee_amount(ONE_18, fee)


class TestCalcOutGivenIn:
    def test_equal_weights_match_constant_product(self):
        balance = Bfp(1000 * ONE_18)
        out = calc_out_given_in(balance, HALF, balance, HALF, Bfp(10 * ONE_18))
        # 1000 * 10 / 1010
        assert abs(out.value - 9_900_990_099_009_900_990) < 10**8
        assert out.value < 9_900_990_099_009_900_990

    def test_heavier_output_weight_pays_less(self):
        balance = Bfp(1000 * ONE_18)
        light_in = Bfp(ONE_18 * 2 // 10)
        heavy_out = Bfp(ONE_18 * 8 // 10)
        amount_in = Bfp(10 * ONE_18)
        equal = calc_out_given_in(balance, HALF, balance, HALF, amount_in)
        skewed = calc_out_given_in(balance, light_in, balance, heavy_out, amount_in)
        assert skewed.value < equal.value

    def test_max_in_ratio(self):
        balance = Bfp(1000 * ONE_18)
        calc_out_given_in(balance, HALF, balance, HALF, Bfp(300 * ONE_18))
        with pytest.raises(MaxInRatioError):
            calc_out_given_in(balance, HALF, balance, HALF, Bfp(300 * ONE_18 + 1))

    def test_zero_weight_rejected(self):
        balance = Bfp(1000 * ONE_18)
        with pytest.raises(ZeroWeightError):
            calc_out_given_in(balance, Bfp(0), balance, HALF, Bfp(ONE_18))

    def test_zero_balance_rejected(self):
        with pytest.raises(ZeroBalanceError):
            calc_out_given_in(Bfp(0), HALF, Bfp(ONE_18), HALF, Bfp(0))
