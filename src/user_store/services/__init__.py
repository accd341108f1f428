"""User store services package."""

from user_store.services.user_store import JsonFileUserStore, UserStore

__all__ = [
    "JsonFileUserStore",
    "UserStore",
]
