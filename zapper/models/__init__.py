"""Pydantic models for zap requests."""

from zapper.models.types import Address, Bytes32, Timestamp, Uint256
from zapper.models.zap import (
    PermitAuthorization,
    PoolLegDescriptor,
    VaultLegDescriptor,
    ZapInRequest,
    ZapOutRequest,
)

__all__ = [
    # Types
    "Address",
    "Bytes32",
    "Timestamp",
    "Uint256",
    # Descriptors
    "PoolLegDescriptor",
    "VaultLegDescriptor",
    # Requests
    "ZapInRequest",
    "ZapOutRequest",
    "PermitAuthorization",
]
