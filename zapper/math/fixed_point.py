"""18-decimal fixed-point arithmetic for the vault leg.

The weighted-pool formula needs a real-valued power function. The vault
computes it with Balancer's LogExpMath (ln/exp series over integers), and a
quote only matches execution if we compute it the same way, bit for bit.
Reference:
https://github.com/balancer-labs/balancer-v2-monorepo/blob/6c9e24e22d0c46cca6dd15861d3d33da61a60b98/pkg/solidity-utils/contracts/math/LogExpMath.sol

All values are integers scaled by 10^18.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import ClassVar

__all__ = [
    "Bfp",
    "LogExpMathError",
    "pow_raw",
    "exp",
    "ONE_18",
    "MAX_IN_RATIO",
]

ONE_18 = 10**18
ONE_20 = 10**20
ONE_36 = 10**36

MAX_NATURAL_EXPONENT = 130 * ONE_18
MIN_NATURAL_EXPONENT = -41 * ONE_18

# ln_36 is used for bases in (0.9, 1.1)
LN_36_LOWER_BOUND = ONE_18 - 10**17
LN_36_UPPER_BOUND = ONE_18 + 10**17

MILD_EXPONENT_BOUND = (1 << 254) // ONE_20

# Exponent decomposition tables: X_n are powers of two, A_n = e^(X_n)
X_18 = (128 * ONE_18, 64 * ONE_18)
A_18 = (
    38877084059945950922200000000000000000000000000000000000,  # e^128
    6235149080811616882910000000,  # e^64
)

X_20 = {
    2: 3_200_000_000_000_000_000_000,
    3: 1_600_000_000_000_000_000_000,
    4: 800_000_000_000_000_000_000,
    5: 400_000_000_000_000_000_000,
    6: 200_000_000_000_000_000_000,
    7: 100_000_000_000_000_000_000,
    8: 50_000_000_000_000_000_000,
    9: 25_000_000_000_000_000_000,
    10: 12_500_000_000_000_000_000,
    11: 6_250_000_000_000_000_000,
}
A_20 = {
    2: 7_896_296_018_268_069_516_100_000_000_000_000,  # e^32
    3: 888_611_052_050_787_263_676_000_000,  # e^16
    4: 298_095_798_704_172_827_474_000,  # e^8
    5: 5_459_815_003_314_423_907_810,  # e^4
    6: 738_905_609_893_065_022_723,  # e^2
    7: 271_828_182_845_904_523_536,  # e^1
    8: 164_872_127_070_012_814_685,  # e^0.5
    9: 128_402_541_668_774_148_407,  # e^0.25
    10: 113_314_845_306_682_631_683,  # e^0.125
    11: 106_449_445_891_785_942_956,  # e^0.0625
}


class LogExpMathError(ArithmeticError):
    """Base or exponent outside the range LogExpMath supports (BAL#006-009)."""

    pass


def _div_trunc(a: int, b: int) -> int:
    """Integer division truncating toward zero, as the EVM does.

    Python's ``//`` floors, which differs for operands of opposite sign.
    """
    if b == 0:
        raise ZeroDivisionError("Division by zero in _div_trunc")
    if (a >= 0) == (b >= 0):
        return a // b
    return -(abs(a) // abs(b))


def _ln(a: int) -> int:
    """Natural logarithm of an 18-decimal value, as 18-decimal."""
    if a < ONE_18:
        return -_ln((ONE_18 * ONE_18) // a)

    sum_val = 0
    for i in range(2):
        if a >= A_18[i] * ONE_18:
            a //= A_18[i]
            sum_val += X_18[i]

    sum_val *= 100
    a *= 100

    for i in range(2, 12):
        if a >= A_20[i]:
            a = (a * ONE_20) // A_20[i]
            sum_val += X_20[i]

    # ln(a) = 2 * arctanh((a - 1) / (a + 1)), six odd terms
    z = ((a - ONE_20) * ONE_20) // (a + ONE_20)
    z_squared = (z * z) // ONE_20
    num = z
    series_sum = num
    for i in range(3, 12, 2):
        num = (num * z_squared) // ONE_20
        series_sum += num // i

    return (sum_val + series_sum * 2) // 100


def _ln_36(x: int) -> int:
    """Natural logarithm with 36-decimal precision, for x close to one."""
    x *= ONE_18
    z = _div_trunc((x - ONE_36) * ONE_36, x + ONE_36)
    z_squared = _div_trunc(z * z, ONE_36)

    num = z
    series_sum = num
    for i in range(3, 16, 2):
        num = _div_trunc(num * z_squared, ONE_36)
        series_sum += _div_trunc(num, i)

    return series_sum * 2


def exp(x: int) -> int:
    """Compute e^x for an 18-decimal exponent.

    Raises:
        LogExpMathError: If x is outside [MIN_NATURAL_EXPONENT, MAX_NATURAL_EXPONENT]
    """
    if not (MIN_NATURAL_EXPONENT <= x <= MAX_NATURAL_EXPONENT):
        raise LogExpMathError(f"Exponent {x} outside valid range")

    if x < 0:
        return (ONE_18 * ONE_18) // exp(-x)

    if x >= X_18[0]:
        x -= X_18[0]
        first_an = A_18[0]
    elif x >= X_18[1]:
        x -= X_18[1]
        first_an = A_18[1]
    else:
        first_an = 1

    x *= 100

    product = ONE_20
    for i in range(2, 10):
        if x >= X_20[i]:
            x -= X_20[i]
            product = (product * A_20[i]) // ONE_20

    # Taylor series up to x^12 / 12!
    series_sum = ONE_20 + x
    term = x
    for i in range(2, 13):
        term = ((term * x) // ONE_20) // i
        series_sum += term

    return (((product * series_sum) // ONE_20) * first_an) // 100


def pow_raw(x: int, y: int) -> int:
    """Compute x^y for non-negative 18-decimal operands (LogExpMath.pow).

    Raises:
        LogExpMathError: If x, y or y * ln(x) is out of range
    """
    if y == 0:
        return ONE_18
    if x == 0:
        return 0
    if x >= (1 << 255):
        raise LogExpMathError(f"Base {x} too large")
    if y >= MILD_EXPONENT_BOUND:
        raise LogExpMathError(f"Exponent {y} exceeds bound")

    if LN_36_LOWER_BOUND < x < LN_36_UPPER_BOUND:
        ln_36_x = _ln_36(x)
        quotient = _div_trunc(ln_36_x, ONE_18)
        remainder = ln_36_x - quotient * ONE_18
        logx_times_y = quotient * y + _div_trunc(remainder * y, ONE_18)
    else:
        logx_times_y = _ln(x) * y

    logx_times_y = _div_trunc(logx_times_y, ONE_18)
    if not (MIN_NATURAL_EXPONENT <= logx_times_y <= MAX_NATURAL_EXPONENT):
        raise LogExpMathError(f"Product {logx_times_y} outside valid range")

    return exp(logx_times_y)


class Bfp:
    """18-decimal fixed-point number stored as int.

    Example: 1.5 is stored as 1_500_000_000_000_000_000.
    """

    ONE: ClassVar[int] = ONE_18
    MAX_POW_RELATIVE_ERROR: ClassVar[int] = 10000  # 10^-14 relative error

    __slots__ = ("value",)
    __hash__ = None  # type: ignore[assignment]

    def __init__(self, value: int) -> None:
        self.value = value

    @classmethod
    def from_wei(cls, wei: int) -> Bfp:
        """Create from a raw value already scaled to 18 decimals."""
        return cls(wei)

    @classmethod
    def from_decimal(cls, d: Decimal) -> Bfp:
        """Create from a non-negative Decimal, rounding half up."""
        if d < 0:
            raise ValueError(f"Bfp.from_decimal requires non-negative input, got {d}")
        scaled = (d * cls.ONE).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return cls(int(scaled))

    def to_decimal(self) -> Decimal:
        return Decimal(self.value) / Decimal(self.ONE)

    def mul_down(self, other: Bfp) -> Bfp:
        return Bfp((self.value * other.value) // self.ONE)

    def mul_up(self, other: Bfp) -> Bfp:
        product = self.value * other.value
        if product == 0:
            return Bfp(0)
        return Bfp((product - 1) // self.ONE + 1)

    def div_down(self, other: Bfp) -> Bfp:
        if other.value == 0:
            raise ZeroDivisionError("Bfp division by zero")
        return Bfp((self.value * self.ONE) // other.value)

    def div_up(self, other: Bfp) -> Bfp:
        if other.value == 0:
            raise ZeroDivisionError("Bfp division by zero")
        numerator = self.value * self.ONE
        if numerator == 0:
            return Bfp(0)
        return Bfp((numerator - 1) // other.value + 1)

    def complement(self) -> Bfp:
        """Return 1 - self, clamped at zero."""
        return Bfp(max(0, self.ONE - self.value))

    def add(self, other: Bfp) -> Bfp:
        return Bfp(self.value + other.value)

    def sub(self, other: Bfp) -> Bfp:
        """Subtract, clamped at zero."""
        return Bfp(max(0, self.value - other.value))

    def pow_up(self, exponent: Bfp) -> Bfp:
        """Compute self^exponent, rounded up by the maximum pow error."""
        raw = pow_raw(self.value, exponent.value)
        product = raw * self.MAX_POW_RELATIVE_ERROR
        max_error = (((product - 1) // self.ONE + 1) if product > 0 else 0) + 1
        return Bfp(raw + max_error)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bfp):
            return NotImplemented
        return self.value == other.value

    def __lt__(self, other: Bfp) -> bool:
        return self.value < other.value

    def __le__(self, other: Bfp) -> bool:
        return self.value <= other.value

    def __repr__(self) -> str:
        return f"Bfp({self.value})"

    def __str__(self) -> str:
        return str(self.to_decimal())


MAX_IN_RATIO = Bfp.from_wei(3 * 10**17)  # 0.3 (30%)
