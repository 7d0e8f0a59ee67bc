"""User database models."""

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from localpassengers.core.constants import (
    MAX_EMAIL_LENGTH,
    MAX_NAME_LENGTH,
    MAX_ROLE_NAME_LENGTH,
)
from localpassengers.core.database.base import Base, TimestampMixin
from localpassengers.core.rbac.roles import Role, parse_role


class User(Base, TimestampMixin):
    """A person who can log in to LocalPassengers.

    Attributes:
        id: Numeric user ID, embedded in tokens
        email: Unique email address
        name: Display name
        password_hash: Bcrypt-hashed password
        role: Role name, one of ``Role``
        is_active: Whether the user can log in
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(
        String(MAX_EMAIL_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    role: Mapped[str] = mapped_column(
        String(MAX_ROLE_NAME_LENGTH),
        default=Role.USER.value,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    @property
    def role_enum(self) -> Role | None:
        """The stored role as a ``Role``, or None if it is not recognised."""
        return parse_role(self.role)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
