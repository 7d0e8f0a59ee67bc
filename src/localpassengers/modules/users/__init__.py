"""User directory backing authentication."""

from localpassengers.modules.users.models import User
from localpassengers.modules.users.repos import (
    UserDirectory,
    UserRepository,
    Users,
    get_user_directory,
)


__all__ = [
    "User",
    "UserDirectory",
    "UserRepository",
    "Users",
    "get_user_directory",
]
