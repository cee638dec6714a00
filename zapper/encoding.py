"""Calldata encoding for the external calls a route makes.

Every executed leg records the call it made as a LegCall, so a settled
route can be replayed or inspected as the transaction it stands for.
"""

from __future__ import annotations

from dataclasses import dataclass

from eth_abi import encode  # type: ignore[attr-defined]
from eth_utils import function_signature_to_4byte_selector

from zapper.models.types import normalize_address

ADD_LIQUIDITY_SIGNATURES = {
    2: "add_liquidity(uint256[2],uint256)",
    3: "add_liquidity(uint256[3],uint256)",
}
REMOVE_ONE_COIN_INT128_SIGNATURE = "remove_liquidity_one_coin(uint256,int128,uint256)"
REMOVE_ONE_COIN_UINT256_SIGNATURE = "remove_liquidity_one_coin(uint256,uint256,uint256)"
VAULT_SWAP_SIGNATURE = (
    "swap((bytes32,uint8,address,address,uint256,bytes),(address,bool,address,bool),uint256,uint256)"
)

ADD_LIQUIDITY_SELECTORS = {
    n: function_signature_to_4byte_selector(sig) for n, sig in ADD_LIQUIDITY_SIGNATURES.items()
}
REMOVE_ONE_COIN_INT128_SELECTOR = function_signature_to_4byte_selector(
    REMOVE_ONE_COIN_INT128_SIGNATURE
)
REMOVE_ONE_COIN_UINT256_SELECTOR = function_signature_to_4byte_selector(
    REMOVE_ONE_COIN_UINT256_SIGNATURE
)
VAULT_SWAP_SELECTOR = function_signature_to_4byte_selector(VAULT_SWAP_SIGNATURE)


@dataclass(frozen=True)
class LegCall:
    """An external call made by a leg.

    Attributes:
        target: Contract called
        calldata: 0x-prefixed ABI-encoded call
        value: Native currency sent with the call
    """

    target: str
    calldata: str
    value: int = 0

    @property
    def selector(self) -> bytes:
        return bytes.fromhex(self.calldata[2:10])


def _address_bytes(address: str) -> bytes:
    return bytes.fromhex(normalize_address(address)[2:])


def encode_add_liquidity(
    pool: str, amounts: list[int] | tuple[int, ...], min_mint_amount: int, value: int = 0
) -> LegCall:
    """Encode ``add_liquidity`` for a 2- or 3-coin pool."""
    n_coins = len(amounts)
    if n_coins not in ADD_LIQUIDITY_SELECTORS:
        raise ValueError(f"add_liquidity takes 2 or 3 amounts, got {n_coins}")
    encoded = encode([f"uint256[{n_coins}]", "uint256"], [list(amounts), min_mint_amount])
    calldata = ADD_LIQUIDITY_SELECTORS[n_coins] + encoded
    return LegCall(target=normalize_address(pool), calldata="0x" + calldata.hex(), value=value)


def encode_remove_liquidity_one_coin(
    pool: str, lp_amount: int, i: int, min_amount: int, *, index_is_uint256: bool = False
) -> LegCall:
    """Encode ``remove_liquidity_one_coin``.

    Older pools take the coin index as int128, newer ones as uint256.
    """
    if index_is_uint256:
        selector = REMOVE_ONE_COIN_UINT256_SELECTOR
        types = ["uint256", "uint256", "uint256"]
    else:
        selector = REMOVE_ONE_COIN_INT128_SELECTOR
        types = ["uint256", "int128", "uint256"]
    calldata = selector + encode(types, [lp_amount, i, min_amount])
    return LegCall(target=normalize_address(pool), calldata="0x" + calldata.hex())


def encode_vault_swap(
    vault: str,
    pool_id: str,
    kind: int,
    asset_in: str,
    asset_out: str,
    amount: int,
    sender: str,
    recipient: str,
    limit: int,
    deadline: int,
    user_data: bytes = b"",
) -> LegCall:
    """Encode ``Vault.swap`` with a single swap and external balances."""
    single_swap = (
        bytes.fromhex(pool_id[2:]),
        kind,
        _address_bytes(asset_in),
        _address_bytes(asset_out),
        amount,
        user_data,
    )
    funds = (_address_bytes(sender), False, _address_bytes(recipient), False)
    encoded = encode(
        [
            "(bytes32,uint8,address,address,uint256,bytes)",
            "(address,bool,address,bool)",
            "uint256",
            "uint256",
        ],
        [single_swap, funds, limit, deadline],
    )
    calldata = VAULT_SWAP_SELECTOR + encoded
    return LegCall(target=normalize_address(vault), calldata="0x" + calldata.hex())


__all__ = [
    "ADD_LIQUIDITY_SELECTORS",
    "REMOVE_ONE_COIN_INT128_SELECTOR",
    "REMOVE_ONE_COIN_UINT256_SELECTOR",
    "VAULT_SWAP_SELECTOR",
    "LegCall",
    "encode_add_liquidity",
    "encode_remove_liquidity_one_coin",
    "encode_vault_swap",
]
