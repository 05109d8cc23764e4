"""
Profile Store

Loads and persists the single gamification profile through an injected
key-value store.

- Lazy load on first access, guarded by a double-checked lock so that
  concurrent first callers share one load
- Missing, unreadable or malformed documents fall back to a default profile
- Save failures are logged; the in-memory profile stays authoritative
- Optional timeouts abort a storage call without committing anything
"""

import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

from pydantic import ValidationError

from expense_gamification.constants import PROFILE_STORAGE_KEY
from expense_gamification.exceptions import StorageTimeoutError
from expense_gamification.gamification.xp_system import normalize_level
from expense_gamification.models.gamification import GamificationProfile
from expense_gamification.observability.metrics import gamification_storage_errors_total
from expense_gamification.storage.base import KeyValueStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ProfileStore:
    """
    Owner of the cached profile instance.

    write_lock serializes read-modify-write sequences (activity recording,
    reset). It is separate from the load lock so a writer can call
    get_profile() while holding it.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        storage_key: str = PROFILE_STORAGE_KEY,
        default_timeout: Optional[float] = None,
    ):
        """
        Args:
            storage: Key-value persistence collaborator
            storage_key: Key the profile document is stored under
            default_timeout: Seconds allowed per storage call when the caller
                passes no timeout (None = wait indefinitely)
        """
        self.storage = storage
        self.storage_key = storage_key
        self.default_timeout = default_timeout
        self.write_lock = asyncio.Lock()
        self._load_lock = asyncio.Lock()
        self._profile: Optional[GamificationProfile] = None

    @property
    def is_loaded(self) -> bool:
        return self._profile is not None

    async def get_profile(self, timeout: Optional[float] = None) -> GamificationProfile:
        """
        Get the cached profile, loading it on first access

        The returned instance is shared; mutate a copy and hand it to
        save_profile().

        Raises:
            StorageTimeoutError: the first load exceeded the timeout
        """
        if self._profile is not None:
            return self._profile

        async with self._load_lock:
            if self._profile is None:
                loaded = await self._load(timeout)
                # A save may have landed while the load was suspended
                if self._profile is None:
                    self._profile = loaded

        return self._profile

    async def save_profile(self, profile: GamificationProfile, timeout: Optional[float] = None) -> bool:
        """
        Persist profile and make it the cached instance

        Returns:
            True if persisted, False if storage failed (profile still cached)

        Raises:
            StorageTimeoutError: the save exceeded the timeout; the cached
                profile is left unchanged
        """
        try:
            payload = profile.to_storage_json()
            await self._with_timeout(self.storage.set(self.storage_key, payload), timeout, "save")
        except StorageTimeoutError:
            raise
        except Exception as e:
            gamification_storage_errors_total.labels(operation="save").inc()
            logger.warning(f"Failed to save gamification profile, keeping it in memory: {e}")
            self._profile = profile
            return False

        self._profile = profile
        logger.debug(f"Saved gamification profile under '{self.storage_key}'")
        return True

    async def _load(self, timeout: Optional[float]) -> GamificationProfile:
        try:
            raw = await self._with_timeout(self.storage.get(self.storage_key), timeout, "load")
        except StorageTimeoutError:
            raise
        except Exception as e:
            gamification_storage_errors_total.labels(operation="load").inc()
            logger.warning(f"Failed to load gamification profile, starting fresh: {e}")
            return GamificationProfile()

        if not raw:
            logger.info("No stored gamification profile, creating default")
            return GamificationProfile()

        try:
            profile = GamificationProfile.from_storage_json(raw)
        except ValidationError as e:
            gamification_storage_errors_total.labels(operation="load").inc()
            logger.warning(f"Stored gamification profile is invalid, starting fresh: {e}")
            return GamificationProfile()

        # Documents from older revisions may predate these invariants
        normalize_level(profile)
        profile.longest_streak = max(profile.longest_streak, profile.current_streak)

        logger.info(f"Loaded gamification profile: level {profile.level}, streak {profile.current_streak}")
        return profile

    async def _with_timeout(self, awaitable: Awaitable[T], timeout: Optional[float], operation: str) -> T:
        if timeout is None:
            timeout = self.default_timeout
        if timeout is None:
            return await awaitable

        try:
            return await asyncio.wait_for(awaitable, timeout)
        except asyncio.TimeoutError as e:
            gamification_storage_errors_total.labels(operation=operation).inc()
            raise StorageTimeoutError(
                message=f"Profile {operation} exceeded {timeout}s",
                key=self.storage_key,
                operation=operation,
                cause=e,
            ) from e
