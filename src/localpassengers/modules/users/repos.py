"""User repository for database operations."""

from typing import Annotated, Protocol

from fastapi import Depends
from sqlalchemy import func, select

from localpassengers.api.dependencies import DBSession
from localpassengers.modules.users.models import User


class UserDirectory(Protocol):
    """Lookups the auth routes need from user storage."""

    async def get_by_id(self, user_id: int) -> User | None: ...

    async def get_by_email(self, email: str) -> User | None: ...

    async def create(self, user: User) -> User: ...


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, user: User) -> User:
        """Create a new user.

        Args:
            user: User instance to create

        Returns:
            The created user with ID populated
        """
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def get_by_id(self, user_id: int) -> User | None:
        """Get a user by ID."""
        return await self.session.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        """Get a user by email address, case-insensitively.

        Args:
            email: The email address

        Returns:
            User if found, None otherwise
        """
        stmt = select(User).where(func.lower(User.email) == email.lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()


def get_user_directory(session: DBSession) -> UserDirectory:
    """Dependency providing the user directory backed by the database."""
    return UserRepository(session)


# Type alias for dependency injection
Users = Annotated[UserDirectory, Depends(get_user_directory)]
