"""Service initialization and dependency injection."""

import logging
from pathlib import Path

from fastapi import Depends
from user_api.config import Settings, get_settings
from user_store.services.user_store import JsonFileUserStore, UserStore

logger = logging.getLogger(__name__)

# Service instances cache
_services_cache: dict[str, UserStore] = {}


def get_user_store(settings: Settings = Depends(get_settings)) -> UserStore:
    """Get the JSON file user store instance.

    One store exists per backing file for the lifetime of the process, so every
    request for the same file shares its cache and lock.

    Args:
        settings: Application settings

    Returns:
        UserStore instance
    """
    key = str(Path(settings.users_file).resolve())
    if key not in _services_cache:
        _services_cache[key] = JsonFileUserStore(key)
        logger.info("Initialized JsonFileUserStore at %s", key)

    return _services_cache[key]
