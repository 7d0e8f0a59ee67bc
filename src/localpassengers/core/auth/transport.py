"""Token transport over HTTP-only cookies and the Authorization header.

Cookie policy:
- both cookies are ``HttpOnly`` and ``SameSite=Strict``
- ``Secure`` is set in production
- the access cookie is scoped to ``/`` and lives as long as the access token
- the refresh cookie is scoped to the refresh endpoint only, so browsers do
  not send it on unrelated requests
"""

from starlette.requests import Request
from starlette.responses import Response

from localpassengers.config import settings


BEARER_PREFIX = "Bearer "


def extract_access_token(request: Request) -> str | None:
    """Extract the access token from a request.

    Priority:
    1. ``Authorization: Bearer <token>`` header
    2. access token cookie

    Args:
        request: The incoming request

    Returns:
        The access token, or None if neither source carries one
    """
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith(BEARER_PREFIX):
        token = auth_header[len(BEARER_PREFIX) :].strip()
        if token:
            return token

    return request.cookies.get(settings.access_token_cookie) or None


def extract_refresh_token(request: Request) -> str | None:
    """Extract the refresh token from the request cookies."""
    return request.cookies.get(settings.refresh_token_cookie) or None


def _set_access_cookie(response: Response, value: str, max_age: int) -> None:
    response.set_cookie(
        key=settings.access_token_cookie,
        value=value,
        max_age=max_age,
        path="/",
        secure=settings.is_production,
        httponly=True,
        samesite="strict",
    )


def _set_refresh_cookie(response: Response, value: str, max_age: int) -> None:
    response.set_cookie(
        key=settings.refresh_token_cookie,
        value=value,
        max_age=max_age,
        path=settings.refresh_token_cookie_path,
        secure=settings.is_production,
        httponly=True,
        samesite="strict",
    )


def attach_access_token(response: Response, access_token: str) -> Response:
    """Set the access token cookie on a response."""
    _set_access_cookie(response, access_token, settings.access_token_max_age)
    return response


def attach_tokens(response: Response, access_token: str, refresh_token: str) -> Response:
    """Set both authentication cookies on a response.

    Args:
        response: Outgoing response
        access_token: JWT access token
        refresh_token: JWT refresh token

    Returns:
        The same response, for chaining
    """
    _set_access_cookie(response, access_token, settings.access_token_max_age)
    _set_refresh_cookie(response, refresh_token, settings.refresh_token_max_age)
    return response


def clear_tokens(response: Response) -> Response:
    """Expire both authentication cookies immediately."""
    _set_access_cookie(response, "", 0)
    _set_refresh_cookie(response, "", 0)
    return response
