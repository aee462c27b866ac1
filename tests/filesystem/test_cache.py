"""
Tests for DataCache.
"""

import asyncio
import os

import pytest

from capfs.exceptions import NotFoundError
from capfs.filesystem import DataCache, FileEntry, VirtualDirectory


def _set_mtime(path, mtime):
    os.utime(path, (mtime, mtime))


class TestDataCache:
    """Tests for the modification-time keyed cache."""

    @pytest.mark.asyncio
    async def test_serves_cached_value_until_modified(self, tmp_path):
        target = tmp_path / "settings.json"
        target.write_text('{"version": 1}')
        _set_mtime(target, 1_700_000_000)
        file = FileEntry(str(target))
        cache = DataCache()

        assert await cache.load_cached_data(file) == {"version": 1}

        # Same mtime: the stale cached value is served
        target.write_text('{"version": 2}')
        _set_mtime(target, 1_700_000_000)
        assert await cache.load_cached_data(file) == {"version": 1}

        _set_mtime(target, 1_700_000_100)
        assert await cache.load_cached_data(file) == {"version": 2}

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        cache = DataCache()

        with pytest.raises(NotFoundError):
            await cache.load_cached_data(FileEntry(str(tmp_path / "missing.json")))

    @pytest.mark.asyncio
    async def test_virtual_and_plain_share_entries(self, tmp_path):
        (tmp_path / "conf.yaml").write_text("name: capfs\n")
        cap = VirtualDirectory(str(tmp_path))
        plain = FileEntry(str(tmp_path / "conf.yaml"))
        cache = DataCache()

        await cache.load_cached_data(cap.get_file("conf.yaml"), "yaml")

        assert plain in cache
        assert len(cache) == 1

    @pytest.mark.asyncio
    async def test_invalidate_and_clear(self, tmp_path):
        (tmp_path / "a.json").write_text("[1]")
        (tmp_path / "b.json").write_text("[2]")
        a = FileEntry(str(tmp_path / "a.json"))
        b = FileEntry(str(tmp_path / "b.json"))
        cache = DataCache()
        await cache.load_cached_data(a)
        await cache.load_cached_data(a, "json")
        await cache.load_cached_data(b)

        cache.invalidate(a)

        assert a not in cache
        assert b in cache

        cache.clear()

        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_concurrent_loads(self, tmp_path):
        (tmp_path / "shared.json").write_text('{"n": 3}')
        file = FileEntry(str(tmp_path / "shared.json"))
        cache = DataCache()

        results = await asyncio.gather(*(cache.load_cached_data(file) for _ in range(5)))

        assert results == [{"n": 3}] * 5
        assert len(cache) == 1
