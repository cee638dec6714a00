"""EIP-2612 permit payloads and signature recovery.

Signatures are checked with eth_account against the EIP-712 typed data the
token would hash on chain.
"""

from eth_account import Account
from eth_account.messages import encode_typed_data

from zapper.models.types import normalize_address

EIP712_DOMAIN_FIELDS = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
    {"name": "verifyingContract", "type": "address"},
]

PERMIT_FIELDS = [
    {"name": "owner", "type": "address"},
    {"name": "spender", "type": "address"},
    {"name": "value", "type": "uint256"},
    {"name": "nonce", "type": "uint256"},
    {"name": "deadline", "type": "uint256"},
]


def permit_typed_data(
    *,
    token_name: str,
    token_version: str,
    chain_id: int,
    token: str,
    owner: str,
    spender: str,
    value: int,
    nonce: int,
    deadline: int,
) -> dict:
    """Build the EIP-712 ``Permit`` message for a token."""
    return {
        "types": {"EIP712Domain": EIP712_DOMAIN_FIELDS, "Permit": PERMIT_FIELDS},
        "primaryType": "Permit",
        "domain": {
            "name": token_name,
            "version": token_version,
            "chainId": chain_id,
            "verifyingContract": normalize_address(token),
        },
        "message": {
            "owner": normalize_address(owner),
            "spender": normalize_address(spender),
            "value": value,
            "nonce": nonce,
            "deadline": deadline,
        },
    }


def recover_permit_signer(typed_data: dict, v: int, r: str, s: str) -> str:
    """Return the lowercase address that signed ``typed_data``."""
    signable = encode_typed_data(full_message=typed_data)
    signer = Account.recover_message(signable, vrs=(v, int(r, 16), int(s, 16)))
    return signer.lower()


def sign_permit(typed_data: dict, private_key: str | bytes) -> tuple[int, str, str]:
    """Sign a permit payload, returning ``(v, r, s)`` with r and s as 0x-prefixed 32-byte hex."""
    signed = Account.sign_message(encode_typed_data(full_message=typed_data), private_key)
    return signed.v, f"0x{signed.r:064x}", f"0x{signed.s:064x}"
