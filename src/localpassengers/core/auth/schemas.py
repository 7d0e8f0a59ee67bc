"""Authentication schemas for token handling."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from localpassengers.core.rbac.roles import Role
from localpassengers.core.responses import CamelModel


class TokenPayload(CamelModel):
    """Identity carried inside both access and refresh tokens.

    Attributes:
        user_id: The user's numeric ID
        email: The user's email address
        role: The user's role at issuance time
    """

    model_config = ConfigDict(frozen=True)

    user_id: int
    email: str
    role: Role


class TokenStatus(StrEnum):
    """Outcome of verifying a token."""

    VALID = "valid"
    EXPIRED = "expired"
    INVALID = "invalid"


class TokenCheck(BaseModel):
    """Verification result that distinguishes expired from invalid tokens.

    ``payload`` is set only when ``status`` is VALID.
    """

    status: TokenStatus
    payload: TokenPayload | None = None

    @property
    def is_valid(self) -> bool:
        return self.status is TokenStatus.VALID


class TokenPair(BaseModel):
    """A freshly issued access/refresh token pair.

    Attributes:
        access_token: Short-lived JWT for API access
        refresh_token: Long-lived JWT for minting new access tokens
        expires_in: Access token lifetime in seconds
    """

    access_token: str
    refresh_token: str
    expires_in: int
