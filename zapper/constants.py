"""Protocol constants for the zap router.

Centralizes sentinel addresses, well-known mainnet tokens and pool
parameters shared by the pools, the legs and the tests.
"""

from zapper.models.types import is_valid_address

# Maximum uint256 value; an allowance of this size is never decremented
MAX_UINT256 = 2**256 - 1

# Sentinel used by Curve pools for the native currency member of a basket
ETH_CONSTANT = "0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee"

# Fixed-point base used by pool rates (1e18)
PRECISION = 10**18

# Curve fee denominator: fee = 4_000_000 means 0.04%
FEE_DENOMINATOR = 10**10

# Curve amplification precision (A is stored multiplied by this)
A_PRECISION = 100

# Balancer vault address (mainnet)
BALANCER_VAULT = "0xba12222222228d8ba445958a75a0704d566bf2c8"


def _validate_token_address(name: str, address: str) -> str:
    """Validate and return a token address.

    Args:
        name: Name of the token (for error messages)
        address: The address to validate

    Returns:
        The validated address

    Raises:
        ValueError: If the address is invalid
    """
    if not is_valid_address(address):
        raise ValueError(f"Invalid {name} address: {address} (must be 0x + 40 hex chars)")
    return address


# Well-known token addresses on mainnet (lowercase for consistency)
# All addresses are validated at import time to catch typos early
DAI = _validate_token_address("DAI", "0x6b175474e89094c44da98b954eedeac495271d0f")
USDC = _validate_token_address("USDC", "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48")
USDT = _validate_token_address("USDT", "0xdac17f958d2ee523a2206206994597c13d831ec7")
THREE_CRV = _validate_token_address("3CRV", "0x6c3f90f043a72fa612cbac8115ee7e52bde6e490")
THREE_CRV_POOL = _validate_token_address(
    "3CRV pool", "0xbebc44782c7db0a1a60cb6fe97d0b483032ff1c7"
)
LUSD = _validate_token_address("LUSD", "0x5f98805a4e8be255a32880fdec7f6728c6568ba0")
LUSD3CRV = _validate_token_address("LUSD3CRV", "0xed279fdd11ca84beef15af5d39bb4d4bee23f0ca")
STETH = _validate_token_address("stETH", "0xae7ab96520de3a18e5e111b5eaab095312d7fe84")
STECRV = _validate_token_address("steCRV", "0x06325440d014e39736583c165c2963ba99faf14e")
STECRV_POOL = _validate_token_address(
    "steCRV pool", "0xdc24316b9ae028f1497c275eb9192a3ea0f67022"
)
