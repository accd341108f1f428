"""User store backed by a single JSON file."""

import asyncio
import json
import logging
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from user_store.models.user import User, UserFields
from user_store.results import Err, Ok, StoreErrorKind, StoreResult
from user_store.validation import format_errors, validate_user_fields

logger = logging.getLogger(__name__)

# Lower-cased key -> canonical key used on write
_CANONICAL_KEYS = {key.lower(): key for key in ("id", "firstName", "lastName", "email")}


class UserStore(ABC):
    """Abstract interface for user storage."""

    @abstractmethod
    async def list_all(self) -> StoreResult[list[User]]:
        """List all users."""
        pass

    @abstractmethod
    async def get_by_id(self, user_id: uuid.UUID) -> StoreResult[User | None]:
        """Get a user by ID. An unknown ID is ``Ok(None)``."""
        pass

    @abstractmethod
    async def create(self, fields: UserFields) -> StoreResult[User]:
        """Create a user with a generated ID."""
        pass

    @abstractmethod
    async def update(self, user_id: uuid.UUID, fields: UserFields) -> StoreResult[None]:
        """Replace all writable fields of an existing user."""
        pass

    @abstractmethod
    async def delete(self, user_id: uuid.UUID) -> StoreResult[bool]:
        """Delete a user. An unknown ID is ``Ok(False)``."""
        pass


def _same_email(a: str, b: str) -> bool:
    return a.lower() == b.lower()


class JsonFileUserStore(UserStore):
    """JSON file implementation of UserStore.

    The file holds a JSON array of user objects. It is read once, on the first
    operation, and the decoded list is kept as the authoritative cache; every
    successful mutation rewrites the whole file and then swaps the cache.

    All operations run under one ``asyncio.Lock``, which makes each
    load-mutate-persist sequence atomic within this process. Nothing
    coordinates with other processes, and edits made to the file by anything
    else after the first load are not picked up.
    """

    def __init__(self, file_path: str | Path) -> None:
        """Initialize the store.

        Args:
            file_path: Path of the backing JSON file. Its directory is created
                if missing; the file itself is created on the first write.
        """
        self.file_path = Path(file_path)
        self.file_path.parent.mkdir(parents=True, exist_ok=True)

        self._lock = asyncio.Lock()
        self._cache: list[User] = []
        self._loaded = False

    async def list_all(self) -> StoreResult[list[User]]:
        """List all users."""
        async with self._lock:
            loaded = await self._load()
            if isinstance(loaded, Err):
                return loaded
            return Ok(list(loaded.value))

    async def get_by_id(self, user_id: uuid.UUID) -> StoreResult[User | None]:
        """Get a user by ID."""
        async with self._lock:
            loaded = await self._load()
            if isinstance(loaded, Err):
                return loaded
            return Ok(next((u for u in loaded.value if u.id == user_id), None))

    async def create(self, fields: UserFields) -> StoreResult[User]:
        """Create a user.

        Args:
            fields: First name, last name and email

        Returns:
            ``Ok`` with the new user, or ``Err`` with ``VALIDATION_FAILED``,
            ``DUPLICATE_EMAIL``, ``STORE_UNAVAILABLE`` or ``STORE_WRITE_FAILED``
        """
        async with self._lock:
            errors = validate_user_fields(fields.first_name, fields.last_name, fields.email)
            if errors:
                return Err(StoreErrorKind.VALIDATION_FAILED, format_errors(errors))

            loaded = await self._load()
            if isinstance(loaded, Err):
                return loaded
            users = loaded.value

            if any(_same_email(u.email, fields.email) for u in users):
                return Err(StoreErrorKind.DUPLICATE_EMAIL, "Email already exists.")

            user = User(
                id=uuid.uuid4(),
                first_name=fields.first_name,
                last_name=fields.last_name,
                email=fields.email,
            )
            saved = await self._save([*users, user])
            if isinstance(saved, Err):
                return saved

            logger.info("Created user %s", user.id)
            return Ok(user)

    async def update(self, user_id: uuid.UUID, fields: UserFields) -> StoreResult[None]:
        """Update a user.

        Args:
            user_id: ID of the user to replace
            fields: New first name, last name and email

        Returns:
            ``Ok(None)``, or ``Err`` with ``VALIDATION_FAILED``, ``NOT_FOUND``,
            ``DUPLICATE_EMAIL``, ``STORE_UNAVAILABLE`` or ``STORE_WRITE_FAILED``
        """
        async with self._lock:
            errors = validate_user_fields(fields.first_name, fields.last_name, fields.email)
            if errors:
                return Err(StoreErrorKind.VALIDATION_FAILED, format_errors(errors))

            loaded = await self._load()
            if isinstance(loaded, Err):
                return loaded
            users = list(loaded.value)

            index = next((i for i, u in enumerate(users) if u.id == user_id), None)
            if index is None:
                return Err(StoreErrorKind.NOT_FOUND, "User not found.")

            if any(u.id != user_id and _same_email(u.email, fields.email) for u in users):
                return Err(StoreErrorKind.DUPLICATE_EMAIL, "Email already exists.")

            users[index] = User(
                id=user_id,
                first_name=fields.first_name,
                last_name=fields.last_name,
                email=fields.email,
            )
            saved = await self._save(users)
            if isinstance(saved, Err):
                return saved

            logger.info("Updated user %s", user_id)
            return Ok(None)

    async def delete(self, user_id: uuid.UUID) -> StoreResult[bool]:
        """Delete a user."""
        async with self._lock:
            loaded = await self._load()
            if isinstance(loaded, Err):
                return loaded

            remaining = [u for u in loaded.value if u.id != user_id]
            if len(remaining) == len(loaded.value):
                return Ok(False)

            saved = await self._save(remaining)
            if isinstance(saved, Err):
                return saved

            logger.info("Deleted user %s", user_id)
            return Ok(True)

    async def _load(self) -> StoreResult[list[User]]:
        """Return the cached users, reading the file on first use. Caller holds the lock."""
        if self._loaded:
            return Ok(self._cache)

        try:
            users = await asyncio.to_thread(self._read_file)
        except (OSError, ValueError) as e:
            logger.error("Failed to load users from %s: %s", self.file_path, e, exc_info=True)
            return Err(StoreErrorKind.STORE_UNAVAILABLE, "User store unavailable.")

        self._cache = users
        self._loaded = True
        return Ok(self._cache)

    async def _save(self, users: list[User]) -> StoreResult[None]:
        """Overwrite the file with ``users``, then make them the cache. Caller holds the lock."""
        try:
            await asyncio.to_thread(self._write_file, users)
        except (OSError, ValueError) as e:
            logger.error("Failed to save users to %s: %s", self.file_path, e, exc_info=True)
            return Err(StoreErrorKind.STORE_WRITE_FAILED, "User store unavailable.")

        self._cache = users
        self._loaded = True
        return Ok(None)

    def _read_file(self) -> list[User]:
        if not self.file_path.exists():
            return []

        text = self.file_path.read_text(encoding="utf-8")
        if not text.strip():
            return []

        data = json.loads(text)
        if data is None:
            return []
        if not isinstance(data, list):
            raise ValueError(f"Expected a JSON array at the root of {self.file_path}")

        try:
            return [User.model_validate(_canonical_keys(item)) for item in data]
        except ValidationError as e:
            raise ValueError(f"Invalid user record in {self.file_path}") from e

    def _write_file(self, users: list[User]) -> None:
        data = [user.model_dump(mode="json", by_alias=True) for user in users]
        self.file_path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def _canonical_keys(item: Any) -> Any:
    """Rename keys that match a user field case-insensitively to the canonical name."""
    if not isinstance(item, dict):
        return item
    return {_CANONICAL_KEYS.get(key.lower(), key): value for key, value in item.items()}
