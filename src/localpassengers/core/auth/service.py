"""Authentication service for login, registration, and token refresh."""

from typing import Annotated

import structlog
from fastapi import Depends

from localpassengers.config import settings
from localpassengers.core.auth.backend import (
    check_refresh_token,
    hash_password,
    issue_access_token,
    issue_refresh_token,
    verify_password,
)
from localpassengers.core.auth.schemas import TokenPair, TokenPayload
from localpassengers.core.errors import (
    ConflictError,
    ErrorCode,
    ForbiddenError,
    UnauthorizedError,
)
from localpassengers.core.rbac.roles import Role
from localpassengers.modules.users.models import User
from localpassengers.modules.users.repos import Users


logger = structlog.get_logger()


def payload_for(user: User) -> TokenPayload:
    """Build the token identity from a user record.

    Raises:
        ForbiddenError: If the stored role is not a known role
    """
    role = user.role_enum
    if role is None:
        logger.warning("user_unknown_role", user_id=user.id, role=user.role)
        raise ForbiddenError(
            "Account has no valid role",
            error_code=ErrorCode.ACCOUNT_INACTIVE,
        )
    return TokenPayload(user_id=user.id, email=user.email, role=role)


def issue_token_pair(payload: TokenPayload) -> TokenPair:
    """Issue a fresh access/refresh pair for an identity."""
    return TokenPair(
        access_token=issue_access_token(payload),
        refresh_token=issue_refresh_token(payload),
        expires_in=settings.access_token_max_age,
    )


class AuthService:
    """Service for authentication operations.

    Handles login, self-service registration and token refresh. Tokens are
    stateless; logout only clears cookies on the client.
    """

    def __init__(self, users: Users) -> None:
        self.users = users

    async def login(self, email: str, password: str) -> tuple[User, TokenPair]:
        """Authenticate with email and password.

        Args:
            email: User's email address
            password: Plain text password

        Returns:
            Tuple of (user, token_pair)

        Raises:
            UnauthorizedError: If the credentials do not match
            ForbiddenError: If the account is deactivated
        """
        user = await self.users.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("login_failed", email=email)
            raise UnauthorizedError(
                "Invalid email or password",
                error_code=ErrorCode.INVALID_CREDENTIALS,
            )

        if not user.is_active:
            raise ForbiddenError(
                "Account is deactivated",
                error_code=ErrorCode.ACCOUNT_INACTIVE,
            )

        tokens = issue_token_pair(payload_for(user))
        logger.info("login_succeeded", user_id=user.id, role=user.role)
        return user, tokens

    async def register(self, email: str, password: str, name: str) -> tuple[User, TokenPair]:
        """Create a USER account and log it in.

        Raises:
            ConflictError: If the email is already registered
        """
        if await self.users.get_by_email(email) is not None:
            raise ConflictError(
                "An account with this email already exists",
                hint="Log in via POST /api/auth/login",
            )

        user = await self.users.create(
            User(
                email=email,
                name=name,
                password_hash=hash_password(password),
                role=Role.USER.value,
                is_active=True,
            )
        )
        logger.info("user_registered", user_id=user.id)
        return user, issue_token_pair(payload_for(user))

    async def refresh(self, refresh_token: str | None) -> tuple[User, TokenPair]:
        """Mint a new token pair from a refresh token.

        The new tokens are built from the current user record, so a role
        change takes effect on the next refresh.

        Args:
            refresh_token: Raw refresh token from the cookie, if any

        Returns:
            Tuple of (user, token_pair)

        Raises:
            UnauthorizedError: If the token is missing or invalid, or the
                user no longer exists
        """
        if not refresh_token:
            raise UnauthorizedError(
                "Refresh token not found",
                error_code=ErrorCode.REFRESH_TOKEN_MISSING,
                hint="Log in via POST /api/auth/login",
            )

        check = check_refresh_token(refresh_token)
        if check.payload is None:
            raise UnauthorizedError(
                "Invalid or expired refresh token",
                error_code=ErrorCode.REFRESH_TOKEN_INVALID,
                hint="Log in via POST /api/auth/login",
            )

        user = await self.users.get_by_id(check.payload.user_id)
        if user is None or not user.is_active:
            raise UnauthorizedError(
                "User not found",
                error_code=ErrorCode.USER_NOT_FOUND,
            )

        tokens = issue_token_pair(payload_for(user))
        logger.info("token_refreshed", user_id=user.id)
        return user, tokens


# Type alias for dependency injection
AuthSvc = Annotated[AuthService, Depends(AuthService)]
