"""Leg adapters: permits, stableswap pool legs and vault legs."""

from zapper.legs.permit import PermitAdapter
from zapper.legs.pool import LegOutcome, PoolLegAdapter
from zapper.legs.vault import VaultLegAdapter

__all__ = ["LegOutcome", "PermitAdapter", "PoolLegAdapter", "VaultLegAdapter"]
