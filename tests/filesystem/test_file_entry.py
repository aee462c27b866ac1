"""
Tests for FileEntry.

This module tests:
- Resolution against the working directory and explicit parents
- Probes (exists, size, modified, can_read, can_write)
- Text and binary read/write
- load_data with each data type
- import_module and delete
"""

import array
import os
from datetime import datetime

import pytest

from capfs.exceptions import (
    ContentUnparseableError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
)
from capfs.filesystem import DirectoryEntry, FileEntry


# =============================================================================
# Construction
# =============================================================================

class TestFileConstruction:
    """Tests for resolving file paths."""

    def test_relative_path_without_parent(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        file = FileEntry("notes.txt")

        assert file.path == os.path.join(os.getcwd(), "notes.txt")
        assert file.parent.path == os.getcwd()
        assert file.parent_path == os.getcwd()

    def test_parent_as_string(self):
        file = FileEntry("config/app.yaml", "/srv/service")

        assert file.path == "/srv/service/config/app.yaml"
        assert file.parent.path == "/srv/service/config"
        assert file.name == "app.yaml"
        assert file.stem == "app"
        assert file.extension == ".yaml"

    def test_parent_as_entry_is_reused(self):
        parent = DirectoryEntry("/srv/service")

        file = FileEntry("run.sh", parent)

        assert file.parent is parent

    def test_absolute_path_inside_parent_is_kept(self):
        file = FileEntry("/srv/service/run.sh", "/srv/service")

        assert file.path == "/srv/service/run.sh"

    def test_absolute_path_outside_parent_is_rerooted(self):
        file = FileEntry("/etc/passwd", "/srv/service")

        assert file.path == "/srv/service/etc/passwd"

    def test_invalid_arguments(self):
        with pytest.raises(InvalidArgumentError):
            FileEntry("")
        with pytest.raises(InvalidArgumentError):
            FileEntry("a.txt", parent=42)

    def test_str(self):
        assert str(FileEntry("/a/b.txt")) == "[FileEntry: /a/b.txt]"


# =============================================================================
# Probes
# =============================================================================

class TestProbes:
    """Tests for probes that never raise."""

    @pytest.mark.asyncio
    async def test_existing_file(self, tmp_path):
        (tmp_path / "data.bin").write_bytes(b"12345")
        file = FileEntry(str(tmp_path / "data.bin"))

        assert await file.exists()
        assert await file.size() == 5
        assert await file.can_read()
        assert await file.can_write()
        modified = await file.modified()
        assert isinstance(modified, datetime)
        assert modified.tzinfo is not None

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        file = FileEntry(str(tmp_path / "missing"))

        assert not await file.exists()
        assert await file.size() is None
        assert await file.modified() is None
        assert not await file.can_read()
        assert not await file.can_write()


# =============================================================================
# Reading and Writing
# =============================================================================

class TestReadWrite:
    """Tests for text and binary content."""

    @pytest.mark.asyncio
    async def test_text_round_trip(self, tmp_path):
        file = FileEntry("greeting.txt", str(tmp_path))

        await file.write("héllo\n")

        assert await file.read() == "héllo\n"
        assert (tmp_path / "greeting.txt").read_text(encoding="utf-8") == "héllo\n"

    @pytest.mark.asyncio
    async def test_explicit_encoding(self, tmp_path):
        file = FileEntry("latin.txt", str(tmp_path))

        await file.write("café", encoding="latin-1")

        assert (tmp_path / "latin.txt").read_bytes() == "café".encode("latin-1")
        assert await file.read("latin-1") == "café"

    @pytest.mark.asyncio
    async def test_binary_round_trip(self, tmp_path):
        file = FileEntry("blob.bin", str(tmp_path))

        await file.write_binary(b"\x00\x01\x02")

        assert await file.read_binary() == b"\x00\x01\x02"
        assert await file.size() == 3

    @pytest.mark.asyncio
    async def test_binary_payload_shapes(self, tmp_path):
        file = FileEntry("blob.bin", str(tmp_path))

        for payload in (bytearray(b"ab"), memoryview(b"ab"), array.array("B", [97, 98])):
            await file.write_binary(payload)
            assert await file.read_binary() == b"ab"

    @pytest.mark.asyncio
    async def test_write_binary_rejects_text(self, tmp_path):
        file = FileEntry("blob.bin", str(tmp_path))

        with pytest.raises(InvalidArgumentError):
            await file.write_binary("not bytes")

        assert not await file.exists()

    @pytest.mark.asyncio
    async def test_read_missing(self, tmp_path):
        file = FileEntry("missing.txt", str(tmp_path))

        with pytest.raises(NotFoundError):
            await file.read()
        with pytest.raises(NotFoundError):
            await file.read_binary()

    @pytest.mark.asyncio
    async def test_write_without_parent_directory(self, tmp_path):
        file = FileEntry("absent/out.txt", str(tmp_path))

        with pytest.raises(InvalidStateError) as exc_info:
            await file.write("x")

        assert exc_info.value.suggestion
        with pytest.raises(InvalidStateError):
            await file.write_binary(b"x")

    @pytest.mark.asyncio
    async def test_undecodable_content(self, tmp_path):
        (tmp_path / "bad.txt").write_bytes(b"\xff\xfe\xfa")
        file = FileEntry(str(tmp_path / "bad.txt"))

        with pytest.raises(ContentUnparseableError) as exc_info:
            await file.read()

        assert isinstance(exc_info.value.cause, UnicodeDecodeError)

    @pytest.mark.asyncio
    async def test_unknown_encoding(self, tmp_path):
        (tmp_path / "a.txt").write_text("a")
        file = FileEntry(str(tmp_path / "a.txt"))

        with pytest.raises(InvalidArgumentError):
            await file.read("no-such-encoding")


# =============================================================================
# load_data
# =============================================================================

class TestLoadData:
    """Tests for structured data loading."""

    @pytest.mark.asyncio
    async def test_json(self, tmp_path):
        (tmp_path / "pkg.json").write_text('{"name": "capfs", "tags": [1, 2]}')
        file = FileEntry(str(tmp_path / "pkg.json"))

        assert await file.load_data("json") == {"name": "capfs", "tags": [1, 2]}
        assert await file.load_data() == {"name": "capfs", "tags": [1, 2]}

    @pytest.mark.asyncio
    async def test_json5_extensions(self, tmp_path):
        (tmp_path / "conf.json5").write_text("{name: 'capfs', // comment\n tags: [1, 2,],}")
        file = FileEntry(str(tmp_path / "conf.json5"))

        assert await file.load_data("json5") == {"name": "capfs", "tags": [1, 2]}
        with pytest.raises(ContentUnparseableError):
            await file.load_data("json")

    @pytest.mark.asyncio
    async def test_yaml_content_by_type(self, tmp_path):
        (tmp_path / "conf.yaml").write_text("name: capfs\ntags:\n  - 1\n  - 2\n")
        file = FileEntry(str(tmp_path / "conf.yaml"))

        with pytest.raises(ContentUnparseableError) as exc_info:
            await file.load_data("json")
        assert exc_info.value.cause is not None

        assert await file.load_data("any") == {"name": "capfs", "tags": [1, 2]}
        assert await file.load_data("YAML") == {"name": "capfs", "tags": [1, 2]}

    @pytest.mark.asyncio
    async def test_unparseable_for_every_parser(self, tmp_path):
        (tmp_path / "broken").write_text("key: [unclosed\n  - : :")
        file = FileEntry(str(tmp_path / "broken"))

        with pytest.raises(ContentUnparseableError):
            await file.load_data("any")

    @pytest.mark.asyncio
    async def test_unknown_type_is_rejected_before_io(self, tmp_path):
        file = FileEntry(str(tmp_path / "missing.xml"))

        with pytest.raises(InvalidArgumentError):
            await file.load_data("xml")

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        with pytest.raises(NotFoundError):
            await FileEntry(str(tmp_path / "missing.json")).load_data("json")


# =============================================================================
# import_module and delete
# =============================================================================

class TestImportAndDelete:
    """Tests for import_module and delete."""

    @pytest.mark.asyncio
    async def test_import_module(self, tmp_path):
        (tmp_path / "plugin.py").write_text("VALUE = 42\n\ndef double(x):\n    return x * 2\n")

        module = await FileEntry(str(tmp_path / "plugin.py")).import_module()

        assert module.VALUE == 42
        assert module.double(4) == 8

    @pytest.mark.asyncio
    async def test_import_syntax_error(self, tmp_path):
        (tmp_path / "broken.py").write_text("def (:\n")

        with pytest.raises(ContentUnparseableError):
            await FileEntry(str(tmp_path / "broken.py")).import_module()

    @pytest.mark.asyncio
    async def test_import_runtime_error(self, tmp_path):
        (tmp_path / "raises.py").write_text("raise RuntimeError('boom')\n")

        with pytest.raises(InvalidStateError) as exc_info:
            await FileEntry(str(tmp_path / "raises.py")).import_module()

        assert isinstance(exc_info.value.cause, RuntimeError)

    @pytest.mark.asyncio
    async def test_import_missing(self, tmp_path):
        with pytest.raises(NotFoundError):
            await FileEntry(str(tmp_path / "absent.py")).import_module()

    @pytest.mark.asyncio
    async def test_delete(self, tmp_path):
        (tmp_path / "tmp.txt").write_text("x")
        file = FileEntry(str(tmp_path / "tmp.txt"))

        await file.delete()

        assert not (tmp_path / "tmp.txt").exists()
        with pytest.raises(NotFoundError):
            await file.delete()
