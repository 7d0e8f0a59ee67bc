"""Unit tests for the token service (JWT and password handling)."""

from datetime import UTC, datetime, timedelta

import pytest
from jose import jwt

from localpassengers.config import settings
from localpassengers.core.auth.backend import (
    check_access_token,
    check_refresh_token,
    decode_without_verify,
    get_token_expiry,
    hash_password,
    is_token_expired,
    issue_access_token,
    issue_refresh_token,
    verify_access_token,
    verify_password,
    verify_refresh_token,
)
from localpassengers.core.auth.schemas import TokenPayload, TokenStatus
from localpassengers.core.rbac.roles import Role


pytestmark = pytest.mark.unit

FROZEN_NOW = 1_800_000_000


class _FrozenDatetime(datetime):
    @classmethod
    def now(cls, tz=None):
        return datetime.fromtimestamp(FROZEN_NOW, tz)


@pytest.fixture
def identity() -> TokenPayload:
    return TokenPayload(user_id=7, email="a@b.com", role=Role.USER)


@pytest.fixture
def frozen_clock(monkeypatch: pytest.MonkeyPatch) -> int:
    """Pin the clock used by jose and the expiry helpers to FROZEN_NOW."""
    monkeypatch.setattr("jose.jwt.datetime", _FrozenDatetime)
    monkeypatch.setattr("localpassengers.core.auth.backend.datetime", _FrozenDatetime)
    return FROZEN_NOW


def access_token_expiring_at(exp: int) -> str:
    return jwt.encode(
        {"sub": "7", "email": "a@b.com", "role": "USER", "type": "access", "exp": exp},
        settings.access_token_secret,
        algorithm=settings.jwt_algorithm,
    )


class TestPasswordHashing:
    """Tests for password hashing functions."""

    def test_hash_password_returns_bcrypt_hash(self):
        hashed = hash_password("mysecretpassword")

        assert hashed != "mysecretpassword"
        assert hashed.startswith("$2b$")

    def test_verify_password(self):
        hashed = hash_password("mysecretpassword")

        assert verify_password("mysecretpassword", hashed) is True
        assert verify_password("wrongpassword", hashed) is False


class TestAccessTokens:
    """Tests for access token issuance and verification."""

    def test_round_trip_returns_original_payload(self, identity: TokenPayload):
        token = issue_access_token(identity)

        assert verify_access_token(token) == identity

    def test_token_is_signed_with_access_secret(self, identity: TokenPayload):
        claims = jwt.decode(
            issue_access_token(identity),
            settings.access_token_secret,
            algorithms=[settings.jwt_algorithm],
        )

        assert claims["sub"] == "7"
        assert claims["email"] == "a@b.com"
        assert claims["role"] == "USER"
        assert claims["type"] == "access"
        assert claims["exp"] - claims["iat"] == settings.access_token_expire_minutes * 60

    def test_each_token_has_unique_jti(self, identity: TokenPayload):
        first = jwt.get_unverified_claims(issue_access_token(identity))
        second = jwt.get_unverified_claims(issue_access_token(identity))

        assert first["jti"] != second["jti"]

    def test_expired_token_is_invalid(self, identity: TokenPayload):
        token = issue_access_token(identity, expires_delta=timedelta(seconds=-5))

        assert verify_access_token(token) is None
        assert check_access_token(token).status is TokenStatus.EXPIRED

    def test_garbage_is_invalid(self):
        check = check_access_token("not.a.jwt")

        assert check.status is TokenStatus.INVALID
        assert check.payload is None
        assert verify_access_token("") is None

    def test_refresh_token_is_not_an_access_token(self, identity: TokenPayload):
        refresh = issue_refresh_token(identity)

        assert verify_access_token(refresh) is None

    def test_token_signed_with_other_key_is_invalid(self, identity: TokenPayload):
        forged = jwt.encode(
            {
                "sub": "7",
                "email": "a@b.com",
                "role": "ADMIN",
                "type": "access",
                "exp": datetime.now(UTC) + timedelta(minutes=5),
            },
            "some-other-secret-that-is-long-enough-123",
            algorithm="HS256",
        )

        assert check_access_token(forged).status is TokenStatus.INVALID

    def test_unknown_role_is_invalid(self):
        token = jwt.encode(
            {
                "sub": "7",
                "email": "a@b.com",
                "role": "CONDUCTOR",
                "type": "access",
                "exp": datetime.now(UTC) + timedelta(minutes=5),
            },
            settings.access_token_secret,
            algorithm=settings.jwt_algorithm,
        )

        assert verify_access_token(token) is None

    def test_non_numeric_subject_is_invalid(self):
        token = jwt.encode(
            {
                "sub": "seven",
                "email": "a@b.com",
                "role": "USER",
                "type": "access",
                "exp": datetime.now(UTC) + timedelta(minutes=5),
            },
            settings.access_token_secret,
            algorithm=settings.jwt_algorithm,
        )

        assert verify_access_token(token) is None


class TestRefreshTokens:
    """Tests for refresh token issuance and verification."""

    def test_round_trip(self, identity: TokenPayload):
        token = issue_refresh_token(identity)

        assert verify_refresh_token(token) == identity

    def test_lifetime_is_refresh_expiry(self, identity: TokenPayload):
        claims = jwt.get_unverified_claims(issue_refresh_token(identity))

        assert claims["type"] == "refresh"
        assert claims["exp"] - claims["iat"] == settings.refresh_token_expire_days * 86400

    def test_access_token_is_not_a_refresh_token(self, identity: TokenPayload):
        assert verify_refresh_token(issue_access_token(identity)) is None

    def test_expired(self, identity: TokenPayload):
        token = issue_refresh_token(identity, expires_delta=timedelta(seconds=-5))

        assert check_refresh_token(token).status is TokenStatus.EXPIRED


class TestDiagnostics:
    """Tests for unverified decoding helpers."""

    def test_decode_without_verify_exposes_only_expiry(self, identity: TokenPayload):
        token = issue_access_token(identity)

        decoded = decode_without_verify(token)

        assert decoded is not None
        assert set(decoded) == {"exp"}
        assert decoded["exp"] == jwt.get_unverified_claims(token)["exp"]

    def test_decode_without_verify_ignores_signature(self):
        token = jwt.encode({"exp": 1_700_000_000}, "unrelated-key", algorithm="HS256")

        assert decode_without_verify(token) == {"exp": 1_700_000_000}

    def test_decode_without_verify_no_expiry(self):
        token = jwt.encode({"sub": "1"}, "unrelated-key", algorithm="HS256")

        assert decode_without_verify(token) == {}
        assert get_token_expiry(token) is None

    def test_decode_without_verify_garbage(self):
        assert decode_without_verify("garbage") is None

    def test_is_token_expired(self, identity: TokenPayload):
        fresh = issue_access_token(identity)
        stale = issue_access_token(identity, expires_delta=timedelta(seconds=-5))

        assert is_token_expired(fresh) is False
        assert is_token_expired(stale) is True
        assert is_token_expired("garbage") is True

    def test_non_numeric_expiry_counts_as_expired(self):
        token = jwt.encode({"exp": "soon"}, "unrelated-key", algorithm="HS256")

        assert decode_without_verify(token) is None
        assert get_token_expiry(token) is None
        assert is_token_expired(token) is True


class TestExpiryBoundary:
    """A token is valid through its ``exp`` second and expired from the next."""

    def test_valid_at_expiry_second(self, frozen_clock: int):
        token = access_token_expiring_at(frozen_clock)

        assert check_access_token(token).status is TokenStatus.VALID
        assert is_token_expired(token) is False

    def test_expired_one_second_after(self, frozen_clock: int):
        token = access_token_expiring_at(frozen_clock - 1)

        assert check_access_token(token).status is TokenStatus.EXPIRED
        assert is_token_expired(token) is True
