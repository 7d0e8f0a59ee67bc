"""Pydantic schemas for user operations."""

from pydantic import EmailStr, Field

from localpassengers.core.constants import (
    MAX_NAME_LENGTH,
    MAX_PASSWORD_LENGTH,
    MIN_PASSWORD_LENGTH,
)
from localpassengers.core.rbac.roles import Role
from localpassengers.core.responses import CamelModel


class LoginRequest(CamelModel):
    """Credentials posted to the login route."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=MAX_PASSWORD_LENGTH)


class RegisterRequest(CamelModel):
    """Self-service sign-up. New accounts always get the USER role."""

    email: EmailStr
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    password: str = Field(
        ..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH
    )


class UserResponse(CamelModel):
    """Public view of a user."""

    id: int
    email: str
    name: str
    role: Role


class AuthResponse(CamelModel):
    """Body returned after login or refresh.

    The tokens are also set as cookies; ``access_token`` is repeated here for
    clients that send it in the ``Authorization`` header instead.
    """

    user: UserResponse
    access_token: str
    expires_in: int
