"""Route shapes, planning and execution."""

from zapper.routing.router import ZapRouter
from zapper.routing.types import RoutePlan, RouteQuote, RouteShape, RouteState, ZapResult

__all__ = ["RoutePlan", "RouteQuote", "RouteShape", "RouteState", "ZapResult", "ZapRouter"]
