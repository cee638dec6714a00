"""Test helpers module for shared test utilities.

- constants: Token, pool and account addresses
- factories: A funded chain with a router, and request/permit factories
"""

from tests.helpers.constants import (
    DAI,
    EP_3CRV,
    EP_LUSD3CRV,
    EP_STECRV,
    ETH_CONSTANT,
    LIQUIDITY_PROVIDER,
    LUSD,
    LUSD3CRV,
    LUSD3CRV_POOL,
    ONE_HOUR,
    OTHER,
    OWNER,
    ROUTER,
    START_TIME,
    STECRV,
    STECRV_POOL,
    STETH,
    THREE_CRV,
    THREE_CRV_POOL,
    USDC,
    USDT,
    USER,
    USER_KEY,
    VAULT_POOL_3CRV,
    VAULT_POOL_LUSD3CRV,
    VAULT_POOL_STECRV,
    units,
)
from tests.helpers.factories import World, build_world, make_permit, make_zap_in, make_zap_out

__all__ = [
    # Constants
    "DAI",
    "USDC",
    "USDT",
    "THREE_CRV",
    "THREE_CRV_POOL",
    "LUSD",
    "LUSD3CRV",
    "LUSD3CRV_POOL",
    "STETH",
    "STECRV",
    "STECRV_POOL",
    "ETH_CONSTANT",
    "EP_3CRV",
    "EP_LUSD3CRV",
    "EP_STECRV",
    "VAULT_POOL_3CRV",
    "VAULT_POOL_LUSD3CRV",
    "VAULT_POOL_STECRV",
    "ROUTER",
    "OWNER",
    "USER",
    "USER_KEY",
    "OTHER",
    "LIQUIDITY_PROVIDER",
    "START_TIME",
    "ONE_HOUR",
    "units",
    # Factories
    "World",
    "build_world",
    "make_zap_in",
    "make_zap_out",
    "make_permit",
]
