"""Pydantic models for zap requests.

Requests are built by the caller for one call and discarded. Field formats
are validated here; whether a request fits the configured pools (basket
order, all-zero amounts, index range) is checked by the route planner so
that it surfaces as InvalidBasket or InvalidRequest.
"""

from pydantic import BaseModel, Field

from zapper.models.types import Address, Bytes32, Timestamp, Uint256


class PoolLegDescriptor(BaseModel):
    """A stableswap pool leg: basket of 2 or 3 coins in fixed order, and its LP token."""

    pool: Address = Field(alias="poolId")
    basket_assets: tuple[Address, ...] = Field(alias="basketAssets", min_length=2, max_length=3)
    lp_token: Address = Field(alias="lpToken")

    model_config = {"populate_by_name": True, "frozen": True}

    @property
    def n_coins(self) -> int:
        return len(self.basket_assets)

    def index_of(self, asset: str) -> int:
        """Return the basket position of ``asset``, or -1 if it is not a member."""
        asset = asset.lower()
        for i, member in enumerate(self.basket_assets):
            if member == asset:
                return i
        return -1


class VaultLegDescriptor(BaseModel):
    """A weighted-pool swap between an LP token and the principal token."""

    vault_pool_id: Bytes32 = Field(alias="vaultPoolId")
    lp_token: Address = Field(alias="lpToken")
    principal_token: Address = Field(alias="principalToken")

    model_config = {"populate_by_name": True, "frozen": True}


class ZapInRequest(BaseModel):
    """Basket in, principal token out."""

    pool_leg: PoolLegDescriptor = Field(alias="poolLeg")
    basket_amounts: tuple[Uint256, ...] = Field(alias="basketAmounts")
    vault_leg: VaultLegDescriptor = Field(alias="vaultLeg")
    min_output: Uint256 = Field(alias="minOutput")
    deadline: Timestamp

    model_config = {"populate_by_name": True, "frozen": True}


class ZapOutRequest(BaseModel):
    """Principal token in, one basket asset out."""

    pool_leg: PoolLegDescriptor = Field(alias="poolLeg")
    vault_leg: VaultLegDescriptor = Field(alias="vaultLeg")
    principal_amount_in: Uint256 = Field(alias="principalAmountIn")
    output_asset: Address = Field(alias="outputAsset")
    output_asset_index: int = Field(alias="outputAssetIndex", ge=0)
    min_output: Uint256 = Field(alias="minOutput")
    deadline: Timestamp
    index_is_uint256: bool = Field(
        default=False,
        alias="indexIsUint256",
        description="Pool's remove_liquidity_one_coin takes a uint256 coin index instead of int128.",
    )

    model_config = {"populate_by_name": True, "frozen": True}


class PermitAuthorization(BaseModel):
    """EIP-2612 permit signed by the caller for the router."""

    token: Address = Field(alias="asset")
    spender: Address
    amount: Uint256 = Field(alias="authorizedAmount")
    expiration: Timestamp
    v: int = Field(ge=0, le=255)
    r: Bytes32
    s: Bytes32

    model_config = {"populate_by_name": True, "frozen": True}
