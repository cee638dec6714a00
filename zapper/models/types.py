"""Shared type definitions for zap request models.

These annotated types validate wire formats at model construction; the
router itself never re-checks them.
"""

from typing import Annotated

from pydantic import AfterValidator, Field

# Maximum uint256 value
UINT256_MAX = 2**256 - 1


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Normalize an Ethereum address to lowercase.

    Args:
        address: An Ethereum address (with or without 0x prefix)
        validate: If True, raises ValueError for invalid addresses.
                  If False (default), returns normalized form without validation.

    Returns:
        Lowercase address with 0x prefix

    Raises:
        ValueError: If validate=True and address is not a valid Ethereum address
    """
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr

    if validate and not is_valid_address(addr):
        raise ValueError(f"Invalid address: {address}")

    return addr


def is_valid_address(address: str) -> bool:
    """Check if a string is a valid Ethereum address.

    Args:
        address: String to validate

    Returns:
        True if valid Ethereum address format
    """
    if not isinstance(address, str):
        return False
    if not address.startswith("0x"):
        return False
    if len(address) != 42:
        return False
    try:
        int(address, 16)
        return True
    except ValueError:
        return False


# Ethereum address (40 hex chars after 0x prefix), normalized to lowercase
Address = Annotated[
    str,
    Field(pattern=r"^0x[a-fA-F0-9]{40}$"),
    AfterValidator(normalize_address),
]

# Token amount; requests carry amounts in the asset's native precision
Uint256 = Annotated[int, Field(ge=0, le=UINT256_MAX)]

# 32-byte identifier (Balancer pool id, signature r/s)
Bytes32 = Annotated[
    str,
    Field(pattern=r"^0x[a-fA-F0-9]{64}$"),
    AfterValidator(str.lower),
]

# Unix timestamp in seconds
Timestamp = Annotated[int, Field(ge=0)]
