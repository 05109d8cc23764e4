"""
Persistence backends for the gamification profile

All backends implement the KeyValueStore protocol:
- InMemoryKeyValueStore: dict-backed, not persisted
- FileKeyValueStore: one file per key with atomic replace
- RedisKeyValueStore: redis.asyncio with graceful degradation
"""

from expense_gamification.storage.base import KeyValueStore
from expense_gamification.storage.memory_store import InMemoryKeyValueStore
from expense_gamification.storage.file_store import FileKeyValueStore
from expense_gamification.storage.redis_store import RedisKeyValueStore

__all__ = [
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "FileKeyValueStore",
    "RedisKeyValueStore",
]
