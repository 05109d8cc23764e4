"""In-memory key-value store (tests and ephemeral sessions)"""
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class InMemoryKeyValueStore:
    """Dict-backed store. Nothing survives the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value
        logger.debug(f"Stored {len(value)} chars under '{key}' (in memory)")

    def __contains__(self, key: str) -> bool:
        return key in self._data
