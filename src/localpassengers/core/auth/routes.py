"""Authentication API routes.

Provides endpoints for:
- Login and self-service registration
- Token refresh from the refresh cookie
- Logout
- The current identity
"""

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from localpassengers.core.auth.dependencies import CurrentIdentity
from localpassengers.core.auth.schemas import TokenPair
from localpassengers.core.auth.service import AuthSvc
from localpassengers.core.auth.transport import (
    attach_tokens,
    clear_tokens,
    extract_refresh_token,
)
from localpassengers.core.responses import success_response
from localpassengers.modules.users.models import User
from localpassengers.modules.users.schemas import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserResponse,
)


router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_response(
    user: User,
    tokens: TokenPair,
    message: str,
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    body = AuthResponse(
        user=UserResponse(id=user.id, email=user.email, name=user.name, role=user.role),
        access_token=tokens.access_token,
        expires_in=tokens.expires_in,
    )
    response = success_response(body, message=message, status_code=status_code)
    attach_tokens(response, tokens.access_token, tokens.refresh_token)
    return response


@router.post(
    "/login",
    summary="Login with email and password",
    description="Sets the access and refresh token cookies.",
)
async def login(data: LoginRequest, service: AuthSvc) -> JSONResponse:
    """Login with email and password."""
    user, tokens = await service.login(email=data.email, password=data.password)
    return _auth_response(user, tokens, "Login successful")


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="Creates a USER account and logs it in.",
)
async def register(data: RegisterRequest, service: AuthSvc) -> JSONResponse:
    """Register a new user."""
    user, tokens = await service.register(
        email=data.email,
        password=data.password,
        name=data.name,
    )
    return _auth_response(user, tokens, "Registration successful", status.HTTP_201_CREATED)


@router.api_route(
    "/refresh",
    methods=["GET", "POST"],
    summary="Refresh the access token",
    description=(
        "Reads the refresh token cookie and issues a new token pair built "
        "from the current user record."
    ),
)
async def refresh(request: Request, service: AuthSvc) -> JSONResponse:
    """Refresh the access token."""
    user, tokens = await service.refresh(extract_refresh_token(request))
    return _auth_response(user, tokens, "Token refreshed successfully")


@router.post(
    "/logout",
    summary="Logout",
    description="Clears both token cookies. Always succeeds.",
)
async def logout() -> JSONResponse:
    """Logout by expiring the token cookies."""
    response = success_response(message="Logged out successfully")
    clear_tokens(response)
    return response


@router.get(
    "/me",
    summary="Current identity",
    description="Returns the identity verified by the authorization middleware.",
)
async def me(identity: CurrentIdentity) -> JSONResponse:
    """Get the current identity."""
    return success_response(
        {"user": {"id": identity.user_id, "email": identity.email, "role": identity.role}},
        message="Authenticated",
    )
