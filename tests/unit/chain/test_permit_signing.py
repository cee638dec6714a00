"""Tests for EIP-2612 payloads and signature recovery."""

from zapper.chain.permit import permit_typed_data, recover_permit_signer, sign_permit
from tests.helpers import ROUTER, START_TIME, USDC, USER, USER_KEY


def usdc_permit(value: int = 1000, nonce: int = 0) -> dict:
    return permit_typed_data(
        token_name="USD Coin",
        token_version="2",
        chain_id=1,
        token=USDC,
        owner=USER,
        spender=ROUTER,
        value=value,
        nonce=nonce,
        deadline=START_TIME,
    )


def test_typed_data_layout():
    data = usdc_permit()
    assert data["primaryType"] == "Permit"
    assert data["domain"] == {
        "name": "USD Coin",
        "version": "2",
        "chainId": 1,
        "verifyingContract": USDC,
    }
    assert data["message"]["spender"] == ROUTER
    assert [f["name"] for f in data["types"]["Permit"]] == ["owner", "spender", "value", "nonce", "deadline"]


def test_sign_and_recover():
    data = usdc_permit()
    v, r, s = sign_permit(data, USER_KEY)
    assert v in (27, 28)
    assert len(r) == len(s) == 66
    assert recover_permit_signer(data, v, r, s) == USER


def test_signature_does_not_cover_other_nonce():
    v, r, s = sign_permit(usdc_permit(nonce=0), USER_KEY)
    assert recover_permit_signer(usdc_permit(nonce=1), v, r, s) != USER
