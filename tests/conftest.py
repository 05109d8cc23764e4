"""Global test fixtures and utilities for gamification tests"""
import pytest
from datetime import date, datetime, timedelta, timezone

from expense_gamification.gamification.profile_store import ProfileStore
from expense_gamification.models.gamification import GamificationProfile
from expense_gamification.services.gamification_service import GamificationService
from expense_gamification.storage.memory_store import InMemoryKeyValueStore


class FakeClock:
    """Callable clock returning a controllable timezone-aware datetime"""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, days: int = 1) -> None:
        self.now += timedelta(days=days)

    def today(self) -> date:
        return self.now.date()


# ============================================================================
# Environment
# ============================================================================

@pytest.fixture(autouse=True)
def clean_gamification_env(monkeypatch):
    """Keep host GAMIFICATION_* variables out of settings-based tests"""
    import os
    for key in list(os.environ):
        if key.startswith("GAMIFICATION_"):
            monkeypatch.delenv(key, raising=False)


# ============================================================================
# Profile Fixtures
# ============================================================================

@pytest.fixture
def fresh_profile():
    """Default profile with no activity"""
    return GamificationProfile()


@pytest.fixture
def yesterday():
    return date(2024, 1, 14)


@pytest.fixture
def today():
    return date(2024, 1, 15)


# ============================================================================
# Storage & Service Fixtures
# ============================================================================

@pytest.fixture
def memory_storage():
    """Empty in-memory key-value store"""
    return InMemoryKeyValueStore()


@pytest.fixture
def profile_store(memory_storage):
    return ProfileStore(memory_storage)


@pytest.fixture
def clock():
    """Clock fixed at 2024-01-15 12:00 UTC"""
    return FakeClock(datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def gamification_service(profile_store, clock):
    """GamificationService over in-memory storage and a fake clock"""
    return GamificationService(profile_store, clock=clock)
