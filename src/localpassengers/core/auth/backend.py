"""Authentication backend for JWT and password handling.

This module provides core authentication utilities including:
- Password hashing with bcrypt
- Access and refresh token issuance, each class signed with its own secret
- Token verification that reports expired and invalid tokens without raising
- Unverified decoding for diagnostics
"""

import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from localpassengers.config import settings
from localpassengers.core.auth.schemas import TokenCheck, TokenPayload, TokenStatus
from localpassengers.core.constants import (
    ACCESS_TOKEN_TYPE,
    BCRYPT_ROUNDS,
    REFRESH_TOKEN_TYPE,
    TOKEN_JTI_LENGTH,
)
from localpassengers.core.rbac.roles import parse_role


pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=BCRYPT_ROUNDS,
)


# ============================================================
# Password Utilities
# ============================================================


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its bcrypt hash."""
    return pwd_context.verify(plain_password, hashed_password)


# ============================================================
# Token Issuance
# ============================================================


def _encode(
    payload: TokenPayload,
    secret: str,
    token_type: str,
    expires_delta: timedelta,
) -> str:
    now = datetime.now(UTC)
    to_encode: dict[str, Any] = {
        "sub": str(payload.user_id),
        "email": payload.email,
        "role": payload.role.value,
        "type": token_type,
        "iat": now,
        "exp": now + expires_delta,
        "jti": secrets.token_urlsafe(TOKEN_JTI_LENGTH),
    }
    return jwt.encode(to_encode, secret, algorithm=settings.jwt_algorithm)


def issue_access_token(
    payload: TokenPayload,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a short-lived JWT access token.

    Args:
        payload: Identity to embed
        expires_delta: Optional custom lifetime, defaults to
            ``ACCESS_TOKEN_EXPIRE_MINUTES``

    Returns:
        Encoded JWT signed with the access-token secret
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    return _encode(payload, settings.access_token_secret, ACCESS_TOKEN_TYPE, expires_delta)


def issue_refresh_token(
    payload: TokenPayload,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a long-lived JWT refresh token.

    Args:
        payload: Identity to embed
        expires_delta: Optional custom lifetime, defaults to
            ``REFRESH_TOKEN_EXPIRE_DAYS``

    Returns:
        Encoded JWT signed with the refresh-token secret
    """
    if expires_delta is None:
        expires_delta = timedelta(days=settings.refresh_token_expire_days)
    return _encode(payload, settings.refresh_token_secret, REFRESH_TOKEN_TYPE, expires_delta)


# ============================================================
# Token Verification
# ============================================================


def _payload_from_claims(claims: dict[str, Any]) -> TokenPayload | None:
    role = parse_role(claims.get("role"))
    email = claims.get("email")
    if role is None or not isinstance(email, str):
        return None
    try:
        return TokenPayload(user_id=int(claims["sub"]), email=email, role=role)
    except (KeyError, TypeError, ValueError):
        return None


def _check(token: str, secret: str, token_type: str) -> TokenCheck:
    """Verify signature, expiry, type and claims of a token.

    The signature is checked before expiry, so EXPIRED is only reported
    for tokens this service actually signed.
    """
    try:
        claims = jwt.decode(token, secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        return TokenCheck(status=TokenStatus.EXPIRED)
    except JWTError:
        return TokenCheck(status=TokenStatus.INVALID)

    if claims.get("type") != token_type:
        return TokenCheck(status=TokenStatus.INVALID)

    payload = _payload_from_claims(claims)
    if payload is None:
        return TokenCheck(status=TokenStatus.INVALID)

    return TokenCheck(status=TokenStatus.VALID, payload=payload)


def check_access_token(token: str) -> TokenCheck:
    """Verify an access token, reporting whether it is valid, expired or invalid."""
    return _check(token, settings.access_token_secret, ACCESS_TOKEN_TYPE)


def check_refresh_token(token: str) -> TokenCheck:
    """Verify a refresh token, reporting whether it is valid, expired or invalid."""
    return _check(token, settings.refresh_token_secret, REFRESH_TOKEN_TYPE)


def verify_access_token(token: str) -> TokenPayload | None:
    """Verify an access token.

    Returns:
        The embedded payload, or None if the token is expired, malformed,
        signed with another key or not an access token
    """
    return check_access_token(token).payload


def verify_refresh_token(token: str) -> TokenPayload | None:
    """Verify a refresh token.

    Returns:
        The embedded payload, or None if the token is not a valid refresh token
    """
    return check_refresh_token(token).payload


# ============================================================
# Diagnostics
# ============================================================


def decode_without_verify(token: str) -> dict[str, Any] | None:
    """Read a token's expiry without checking its signature.

    Never use the result for an authentication decision.

    Returns:
        ``{"exp": <unix seconds>}``, an empty dict if the token has no
        expiry, or None if it cannot be decoded or its expiry is not a number
    """
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        return None

    exp = claims.get("exp")
    if exp is None:
        return {}
    if isinstance(exp, bool) or not isinstance(exp, int | float):
        return None
    return {"exp": int(exp)}


def get_token_expiry(token: str) -> int | None:
    """Get a token's expiry as a Unix timestamp, unverified."""
    decoded = decode_without_verify(token)
    if not decoded:
        return None
    return decoded.get("exp")


def is_token_expired(token: str) -> bool:
    """Check expiry without verifying. Undecodable tokens count as expired."""
    exp = get_token_expiry(token)
    if exp is None:
        return True
    return exp < int(datetime.now(UTC).timestamp())
