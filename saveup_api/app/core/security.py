"""
Security helpers for password hashing and bearer tokens.

This module implements a lightweight JSON Web Token (JWT) mechanism
using HMAC-SHA256 signatures and base64url encoding.  A token embeds
the identity of a ``Principal`` (``userId``, ``email``, ``username``)
and an expiration timestamp (``exp``).  Tokens are never stored: they
are invalidated only by expiry.

Passwords are hashed with PBKDF2-HMAC-SHA256 and a random salt; the
stored form is ``salthex$hashhex``.
"""

import base64
import hashlib
import hmac
import json
import logging
import os
import time
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from .config import settings
from ..schemas.auth import Principal

logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 100_000


def _b64_url_encode(data: bytes) -> str:
    """Base64-url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64-url encoded string, adding padding if necessary."""
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    """Compute HMAC-SHA256 signature of a message using the given secret."""
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def _encode_segment(data: Dict[str, Any]) -> str:
    return _b64_url_encode(json.dumps(data, separators=(",", ":")).encode("utf-8"))


def create_access_token(
    principal: Principal,
    expires_delta: Optional[int] = None,
    secret: Optional[str] = None,
) -> str:
    """Create a signed token for ``principal``.

    Parameters
    ----------
    principal : Principal
        Identity to embed.  Only ``userId``, ``email`` and ``username``
        are written to the payload.
    expires_delta : Optional[int]
        Lifetime of the token in seconds.  Defaults to
        ``settings.access_token_expire_minutes * 60`` (seven days).
    secret : Optional[str]
        Signing secret.  Defaults to ``settings.secret_key``.

    Returns
    -------
    str
        A token of the form ``header.payload.signature``.
    """
    claims = principal.to_claims()
    lifetime = expires_delta if expires_delta is not None else settings.access_token_expire_minutes * 60
    claims["exp"] = int(time.time()) + lifetime
    header = {"alg": settings.algorithm, "typ": "JWT"}
    signing_input = f"{_encode_segment(header)}.{_encode_segment(claims)}"
    signature = _sign(signing_input.encode("utf-8"), secret or settings.secret_key)
    return f"{signing_input}.{_b64_url_encode(signature)}"


def decode_access_token(token: str, secret: Optional[str] = None) -> Optional[Principal]:
    """Verify a token and return the principal it carries.

    Returns ``None`` for anything that is not a valid, unexpired token
    signed with ``secret``: wrong number of segments, undecodable
    segments, signature mismatch, missing or past ``exp`` and payloads
    without the identity claims.  This function never raises.
    """
    try:
        parts = token.split(".")
        if len(parts) != 3:
            return None
        header_b64, payload_b64, signature_b64 = parts
        signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
        expected_sig = _sign(signing_input, secret or settings.secret_key)
        actual_sig = _b64_url_decode(signature_b64)
        if not hmac.compare_digest(expected_sig, actual_sig):
            return None
        data = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
        if not isinstance(data, dict):
            return None
        if data.get("exp") is None or int(data["exp"]) < int(time.time()):
            return None
        return Principal.model_validate(data)
    except (ValueError, TypeError, PydanticValidationError):
        # binascii.Error and JSONDecodeError are ValueError subclasses
        return None


def hash_password(password: str) -> str:
    """Hash a password using PBKDF2-HMAC with SHA-256.

    A 16-byte random salt is generated for each password.  The result
    is the salt and the derived key, both hex encoded, separated by
    ``$``.
    """
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ITERATIONS)
    return f"{salt.hex()}${dk.hex()}"


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify a plain password against a stored ``salt$hash`` string.

    Malformed or missing stored hashes never match.
    """
    if not hashed_password or not isinstance(plain_password, str):
        return False
    try:
        salt_hex, hash_hex = hashed_password.split("$", 1)
        salt = bytes.fromhex(salt_hex)
        stored_hash = bytes.fromhex(hash_hex)
    except ValueError:
        logger.warning("Stored password hash has an unexpected format")
        return False
    dk = hashlib.pbkdf2_hmac("sha256", plain_password.encode("utf-8"), salt, PBKDF2_ITERATIONS)
    return hmac.compare_digest(dk, stored_hash)
