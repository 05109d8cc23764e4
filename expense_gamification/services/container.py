"""
Service Container - Dependency Injection Container

Simple DI container for the gamification services.
Uses lazy loading to only instantiate services when first accessed.
"""

from dataclasses import dataclass, field
from typing import Optional
import logging

from expense_gamification.config import Settings
from expense_gamification.exceptions import ConfigurationError
from expense_gamification.storage import (
    FileKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueStore,
    RedisKeyValueStore,
)

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """
    Simple dependency injection container for services.

    Services are lazy-loaded on first access via properties.
    Settings and the storage backend are injected.
    """

    settings: Settings
    storage: KeyValueStore

    # Services (lazy-loaded via properties)
    _profile_store: Optional[object] = field(default=None, init=False, repr=False)
    _gamification_service: Optional[object] = field(default=None, init=False, repr=False)

    @property
    def profile_store(self):
        """Get ProfileStore instance (lazy-loaded)"""
        if self._profile_store is None:
            from expense_gamification.gamification.profile_store import ProfileStore
            self._profile_store = ProfileStore(
                self.storage,
                storage_key=self.settings.profile_storage_key,
                default_timeout=self.settings.storage_timeout_seconds,
            )
            logger.debug("ProfileStore instantiated")
        return self._profile_store

    @property
    def gamification_service(self):
        """Get GamificationService instance (lazy-loaded)"""
        if self._gamification_service is None:
            from expense_gamification.services.gamification_service import GamificationService
            self._gamification_service = GamificationService(
                self.profile_store,
                timezone_name=self.settings.timezone,
            )
            logger.debug("GamificationService instantiated")
        return self._gamification_service

    async def close(self) -> None:
        """Release backend connections"""
        if isinstance(self.storage, RedisKeyValueStore):
            await self.storage.close()


def create_storage(settings: Settings) -> KeyValueStore:
    """
    Build the configured storage backend

    Raises:
        ConfigurationError: redis backend selected without a redis_url
    """
    if settings.storage_backend == "memory":
        logger.warning("Using in-memory storage - gamification progress is NOT persisted")
        return InMemoryKeyValueStore()

    if settings.storage_backend == "redis":
        if not settings.redis_url:
            raise ConfigurationError(
                "GAMIFICATION_REDIS_URL is required for the redis storage backend",
                config_key="redis_url",
            )
        return RedisKeyValueStore(settings.redis_url)

    return FileKeyValueStore(settings.data_path)


async def init_container(settings: Optional[Settings] = None) -> ServiceContainer:
    """
    Build the service container and connect its storage backend.

    Args:
        settings: Settings to use (loaded from the environment if omitted)

    Returns:
        ServiceContainer: The initialized container
    """
    settings = settings or Settings()
    storage = create_storage(settings)

    if isinstance(storage, RedisKeyValueStore):
        await storage.connect()

    container = ServiceContainer(settings=settings, storage=storage)
    logger.info(f"Service container initialized ({settings.storage_backend} storage)")
    return container
