"""Pricing math error classes.

Weighted errors map to Balancer V2 error codes; stableswap errors map to the
reverts of Curve's Vyper pools.
"""


class MathError(Exception):
    """Base error for pool pricing math."""

    pass


class MaxInRatioError(MathError):
    """Error 304: Input amount exceeds 30% of balance_in."""

    pass


class InvalidFeeError(MathError):
    """Swap fee must be in range [0, 1)."""

    pass


class InvalidScalingFactorError(MathError):
    """Scaling factor must be positive."""

    pass


class ZeroWeightError(MathError):
    """Token weight must be positive."""

    pass


class ZeroBalanceError(MathError):
    """Token balance must be positive for swaps."""

    pass


class InvariantDidNotConverge(MathError):
    """Newton iteration for the stableswap invariant D did not converge."""

    pass


class BalanceDidNotConverge(MathError):
    """Newton iteration for a stableswap balance y did not converge."""

    pass


class InvariantDecreased(MathError):
    """Deposit would not increase the stableswap invariant."""

    pass


class WithdrawExceedsSupply(MathError):
    """LP amount to burn is zero or exceeds the LP token supply."""

    pass
