"""
Modification-time keyed cache for parsed file data.

DataCache sits in front of load_data() for files that are read repeatedly
(configuration, manifests) and re-parses a file only after it has changed on
disk.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, Optional, Tuple, Union

from ..config import get_config
from ..exceptions import NotFoundError
from ..validation import assert_type
from .entries import FileEntry
from .virtual import VirtualFile

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, str]


class DataCache:
    """
    Caches load_data() results keyed by real path and data type.

    An entry is served from the cache while the file's modification time is
    not newer than the one recorded when it was parsed. Virtual files share
    cache entries with plain files at the same real path.
    """

    def __init__(self):
        self._data: Dict[CacheKey, Any] = {}
        self._modified: Dict[CacheKey, datetime] = {}
        self._lock = asyncio.Lock()

    @staticmethod
    def _key(file: Union[FileEntry, VirtualFile], data_type: Optional[str]) -> CacheKey:
        real_path = file.real.path if file.is_virtual else file.path
        return real_path, (data_type or get_config().default_data_type).lower()

    async def load_cached_data(
        self,
        file: Union[FileEntry, VirtualFile],
        type: Optional[str] = None,
    ) -> Any:
        """
        Return the parsed content of ``file``, parsing it only if it changed.

        Args:
            file: File to load
            type: Data type token passed through to load_data()

        Raises:
            NotFoundError: If the file does not exist
            ContentUnparseableError: If the content cannot be parsed
        """
        assert_type(file, Union[FileEntry, VirtualFile], name="file")
        assert_type(type, Optional[str], name="type")

        key = self._key(file, type)
        async with self._lock:
            modified = await file.modified()
            if modified is None:
                self._forget(key)
                raise NotFoundError(f"No such file '{file.path}'", path=file.path)

            cached_at = self._modified.get(key)
            if cached_at is not None and modified <= cached_at:
                logger.debug(f"Cache hit for {key[0]} ({key[1]})")
                return self._data[key]

            data = await file.load_data(type)
            self._data[key] = data
            self._modified[key] = modified
            logger.debug(f"Cached {key[0]} ({key[1]}) at {modified.isoformat()}")
            return data

    def _forget(self, key: CacheKey) -> None:
        self._data.pop(key, None)
        self._modified.pop(key, None)

    def invalidate(self, file: Union[FileEntry, VirtualFile]) -> None:
        """Drop every cached result for ``file``."""
        assert_type(file, Union[FileEntry, VirtualFile], name="file")
        real_path = self._key(file, None)[0]
        for key in [key for key in self._data if key[0] == real_path]:
            self._forget(key)

    def clear(self) -> None:
        """Drop every cached result."""
        self._data.clear()
        self._modified.clear()

    def __contains__(self, file: object) -> bool:
        if not isinstance(file, (FileEntry, VirtualFile)):
            return False
        real_path = self._key(file, None)[0]
        return any(key[0] == real_path for key in self._data)

    def __len__(self) -> int:
        return len(self._data)
