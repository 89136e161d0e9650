import base64
import json

from saveup_api.app.core import security
from saveup_api.app.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from saveup_api.app.schemas.auth import Principal

PRINCIPAL = Principal(user_id=5, email="asha@example.com", username="asha")


def _b64(data):
    return base64.urlsafe_b64encode(json.dumps(data).encode()).rstrip(b"=").decode()


def test_token_round_trip_returns_identity():
    token = create_access_token(PRINCIPAL)

    assert decode_access_token(token) == PRINCIPAL


def test_token_payload_carries_identity_claims_and_expiry():
    token = create_access_token(PRINCIPAL, expires_delta=60)
    payload = json.loads(base64.urlsafe_b64decode(token.split(".")[1] + "=="))

    assert payload["userId"] == 5
    assert payload["email"] == "asha@example.com"
    assert payload["username"] == "asha"
    assert isinstance(payload["exp"], int)


def test_token_signed_with_other_secret_is_rejected():
    token = create_access_token(PRINCIPAL, secret="another-secret")

    assert decode_access_token(token) is None
    assert decode_access_token(token, secret="another-secret") == PRINCIPAL


def test_expired_token_is_rejected():
    token = create_access_token(PRINCIPAL, expires_delta=-10)

    assert decode_access_token(token) is None


def test_tampered_payload_is_rejected():
    header, _, signature = create_access_token(PRINCIPAL).split(".")
    forged = _b64({"userId": 1, "email": "admin@example.com", "username": "admin", "exp": 4102444800})

    assert decode_access_token(f"{header}.{forged}.{signature}") is None


def test_malformed_tokens_are_rejected_without_raising():
    for token in ["", "abc", "a.b", "a.b.c.d", "!!!.???.***", "e30.e30.", "..."]:
        assert decode_access_token(token) is None


def test_token_without_identity_claims_is_rejected():
    token = create_access_token(PRINCIPAL)
    header = token.split(".")[0]
    # Re-sign a payload that lacks ``username`` with the real secret.
    payload = _b64({"userId": 5, "email": "asha@example.com", "exp": 4102444800}).encode()
    signing_input = f"{header}.{payload.decode()}"
    signature = security._b64_url_encode(
        security._sign(signing_input.encode(), security.settings.secret_key)
    )

    assert decode_access_token(f"{signing_input}.{signature}") is None


def test_password_hash_verifies_only_the_original_password():
    hashed = hash_password("s3cret")

    assert "$" in hashed
    assert "s3cret" not in hashed
    assert verify_password("s3cret", hashed)
    assert not verify_password("wrong", hashed)


def test_password_hashes_are_salted():
    assert hash_password("same") != hash_password("same")


def test_malformed_stored_hash_never_verifies():
    assert not verify_password("pw", None)
    assert not verify_password("pw", "")
    assert not verify_password("pw", "not-a-hash")
    assert not verify_password("pw", "zz$zz")
