"""
Local Filesystem Storage Implementation.
Each key is stored as one UTF-8 file inside a base directory.
"""

import logging
import os
import re
import uuid
import aiofiles
from pathlib import Path
from typing import Optional

from .interface import StorageInterface
from ..core.exceptions import PersistenceError

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")
_SUFFIX = ".json"


class LocalStorage(StorageInterface):
    """
    Local filesystem key-value store.
    Writes go to a temporary file first and are then renamed over the
    target, so a failed write never leaves a truncated value behind.
    """

    def __init__(self, base_dir: str = "./data"):
        """
        Initialize local storage with a base directory.

        Args:
            base_dir: Base directory for all stored keys
        """
        self.base_dir = Path(base_dir).resolve()
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _get_full_path(self, key: str) -> Path:
        """Map a key to its file inside the base directory."""
        # Keys are flat names; this also rules out path traversal
        if not _KEY_PATTERN.match(key) or key.startswith("."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.base_dir / f"{key}{_SUFFIX}"

    async def get(self, key: str) -> Optional[str]:
        """Read a key from disk."""
        full_path = self._get_full_path(key)
        if not full_path.exists():
            return None
        try:
            async with aiofiles.open(full_path, 'r', encoding='utf-8') as f:
                return await f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Error loading key {key}: {e}")
            return None

    async def set(self, key: str, value: str) -> None:
        """Atomically overwrite a key on disk."""
        full_path = self._get_full_path(key)
        tmp_path = full_path.with_name(f".{full_path.name}.{uuid.uuid4().hex}.tmp")
        try:
            async with aiofiles.open(tmp_path, 'w', encoding='utf-8') as f:
                await f.write(value)
            os.replace(tmp_path, full_path)
        except OSError as e:
            logger.error(f"Error saving key {key}: {e}")
            if tmp_path.exists():
                tmp_path.unlink()
            raise PersistenceError(key, str(e)) from e
