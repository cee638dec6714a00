"""Router configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType

from zapper.routing.types import RouteShape

# Default slippage band around an estimate, per route
DEFAULT_TOLERANCE = Decimal("0.075")


def _default_tolerances() -> dict[RouteShape, Decimal]:
    return {shape: DEFAULT_TOLERANCE for shape in RouteShape}


@dataclass(frozen=True)
class ZapConfig:
    """Centralized configuration for the zap router.

    Attributes:
        chain_id: Chain id of the EIP-712 domain permits are signed for
        route_tolerances: Slippage tolerance per route shape, as a fraction of
            the estimate. The three-hop routes pay an extra pool fee, so
            deployments may widen them independently.
    """

    chain_id: int = 1
    route_tolerances: Mapping[RouteShape, Decimal] = field(default_factory=_default_tolerances, hash=False)

    def __post_init__(self) -> None:
        """Store the tolerance table read only."""
        object.__setattr__(self, "route_tolerances", MappingProxyType(dict(self.route_tolerances)))

    def tolerance(self, shape: RouteShape) -> Decimal:
        return self.route_tolerances.get(shape, DEFAULT_TOLERANCE)

    def min_output_for(self, shape: RouteShape, estimate: int) -> int:
        """Minimum output that accepts up to this route's tolerance below ``estimate``."""
        offset = int(Decimal(estimate) * self.tolerance(shape))
        return estimate - offset

    def tolerance_bounds(self, shape: RouteShape, estimate: int) -> tuple[int, int]:
        """(lower, upper) band around ``estimate`` for this route."""
        offset = int(Decimal(estimate) * self.tolerance(shape))
        return estimate - offset, estimate + offset

    @classmethod
    def from_env(cls) -> ZapConfig:
        """Build a config from ``ZAPPER_*`` environment variables.

        ``ZAPPER_CHAIN_ID`` sets the chain id and ``ZAPPER_TOLERANCE_<SHAPE>``
        (e.g. ``ZAPPER_TOLERANCE_ZAP_IN=0.05``) overrides one route's tolerance.
        """
        chain_id = int(os.environ.get("ZAPPER_CHAIN_ID", "1"))
        tolerances = _default_tolerances()
        for shape in RouteShape:
            raw = os.environ.get(f"ZAPPER_TOLERANCE_{shape.name}")
            if raw is None:
                continue
            tolerance = Decimal(raw)
            if tolerance < 0 or tolerance >= 1:
                raise ValueError(f"Tolerance for {shape.value} must be in [0, 1), got {raw}")
            tolerances[shape] = tolerance
        return cls(chain_id=chain_id, route_tolerances=tolerances)


# Default configuration instance
DEFAULT_ZAP_CONFIG = ZapConfig()
