"""Zapper - multi-hop routing between stable baskets and principal tokens."""

from zapper.routing.router import ZapRouter

__version__ = "0.1.0"
__all__ = ["ZapRouter", "__version__"]
