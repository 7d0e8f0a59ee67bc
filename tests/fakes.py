"""Test doubles and helpers shared across the suite."""

from datetime import timedelta
from http.cookies import SimpleCookie

from httpx import Response

from localpassengers.core.auth.backend import hash_password, issue_access_token, issue_refresh_token
from localpassengers.core.auth.schemas import TokenPayload
from localpassengers.core.rbac.roles import Role
from localpassengers.modules.users.models import User


PASSWORD = "Correct-Horse-42"

# Hashed once per session; bcrypt is slow on purpose
PASSWORD_HASH = hash_password(PASSWORD)


class InMemoryUserDirectory:
    """Dict-backed stand-in for ``UserRepository``."""

    def __init__(self) -> None:
        self._users: dict[int, User] = {}
        self._next_id = 1

    def add(
        self,
        email: str,
        role: Role | str = Role.USER,
        name: str = "Test User",
        is_active: bool = True,
        user_id: int | None = None,
    ) -> User:
        user = User(
            id=user_id if user_id is not None else self._next_id,
            email=email,
            name=name,
            password_hash=PASSWORD_HASH,
            role=str(role),
            is_active=is_active,
        )
        self._users[user.id] = user
        self._next_id = max(self._next_id, user.id) + 1
        return user

    def remove(self, user_id: int) -> None:
        self._users.pop(user_id, None)

    async def get_by_id(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    async def get_by_email(self, email: str) -> User | None:
        for user in self._users.values():
            if user.email.lower() == email.lower():
                return user
        return None

    async def create(self, user: User) -> User:
        user.id = self._next_id
        self._next_id += 1
        self._users[user.id] = user
        return user


def payload(user_id: int = 7, email: str = "a@b.com", role: Role = Role.USER) -> TokenPayload:
    return TokenPayload(user_id=user_id, email=email, role=role)


def bearer(
    token_payload: TokenPayload,
    expires_delta: timedelta | None = None,
) -> dict[str, str]:
    """Authorization header carrying a fresh access token."""
    return {"Authorization": f"Bearer {issue_access_token(token_payload, expires_delta)}"}


def refresh_cookie(token_payload: TokenPayload, expires_delta: timedelta | None = None) -> str:
    return f"refreshToken={issue_refresh_token(token_payload, expires_delta)}"


def set_cookies(response: Response) -> dict[str, str]:
    """Map cookie name to its raw ``Set-Cookie`` header."""
    headers: dict[str, str] = {}
    for raw in response.headers.get_list("set-cookie"):
        name = raw.split("=", 1)[0]
        headers[name] = raw
    return headers


def cookie_value(raw_header: str) -> str:
    cookie = SimpleCookie()
    cookie.load(raw_header)
    (morsel,) = cookie.values()
    return morsel.value
