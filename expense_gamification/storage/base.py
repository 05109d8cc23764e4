"""Key-value persistence contract consumed by the profile store"""
from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    """
    Async string key-value store.

    get() returns None when no value exists or the read fails.
    set() may raise StorageError; callers decide whether that is fatal.
    """

    async def get(self, key: str) -> Optional[str]:
        ...

    async def set(self, key: str, value: str) -> None:
        ...
