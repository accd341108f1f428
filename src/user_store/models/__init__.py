"""User store models package."""

from user_store.models.user import (
    CreateUserRequest,
    UpdateUserRequest,
    User,
    UserFields,
    UserPage,
)

__all__ = [
    "CreateUserRequest",
    "UpdateUserRequest",
    "User",
    "UserFields",
    "UserPage",
]
