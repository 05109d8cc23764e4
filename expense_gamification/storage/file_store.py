"""
File-backed key-value store.

Each key maps to one UTF-8 file under the data directory. Writes go to a
temporary file in the same directory and are moved into place with
os.replace, so readers see either the old or the new document.
"""

import asyncio
import contextlib
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Union

from expense_gamification.exceptions import wrap_storage_exception

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class FileKeyValueStore:
    """Store string values as files in a directory"""

    def __init__(self, data_path: Union[str, Path]):
        self.data_path = Path(data_path)

    def path_for(self, key: str) -> Path:
        """Map a key to its file, replacing characters unsafe in file names"""
        safe = _UNSAFE_KEY_CHARS.sub("_", key).lstrip(".") or "_"
        return self.data_path / f"{safe}.json"

    async def get(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        try:
            return await asyncio.to_thread(self._read, path)
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"File read error for key '{key}' ({path}): {e}")
            return None

    async def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        try:
            await asyncio.to_thread(self._write, path, value)
        except OSError as e:
            raise wrap_storage_exception(e, "set", key) from e
        logger.debug(f"Wrote key '{key}' to {path}")

    @staticmethod
    def _read(path: Path) -> Optional[str]:
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    @staticmethod
    def _write(path: Path, value: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_name, path)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise
