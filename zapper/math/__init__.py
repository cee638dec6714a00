"""Pricing math for the zap legs.

- Bfp: 18-decimal fixed-point arithmetic (Balancer-style)
- weighted: out-given-in for the vault's weighted pools
- stableswap: invariant, deposit and single-coin withdrawal for Curve pools
"""

from zapper.math.fixed_point import Bfp

__all__ = ["Bfp"]
