"""Plain filesystem entries.

A DirectoryEntry or FileEntry wraps one absolute, normalized path. Its
metadata is resolved once at construction and never changes; "moving" to
another path always means constructing a new entry. All I/O is asynchronous.

Example:
    >>> project = DirectoryEntry("/tmp/project")
    >>> project.get_file("pkg.json").path
    '/tmp/project/pkg.json'
    >>> [d.path for d in DirectoryEntry("/a/b").walk_up()]
    ['/a/b', '/a', '/']
"""

from __future__ import annotations

import array
import asyncio
import fnmatch
import glob as globbing
import importlib.util
import logging
import os
from datetime import datetime, timezone
from functools import cached_property
from types import ModuleType
from typing import Any, Callable, Iterator, List, Optional, Tuple, TypeVar, Union

import aiofiles
import aiofiles.os

from ..config import get_config
from ..exceptions import (
    CapFSError,
    ContentUnparseableError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
)
from ..validation import assert_type
from . import paths
from .data_models import EntryMeta, Listing
from .loaders import PARSE_ERRORS, parsers_for

logger = logging.getLogger(__name__)

D = TypeVar("D")
F = TypeVar("F")

# (parent directory, name, is_directory, is_file)
_Found = Tuple[str, str, bool, bool]

BINARY_TYPES = (bytes, bytearray, memoryview, array.array)
"""Payload shapes accepted by write_binary."""


def build_meta(supplied: Optional[str], resolved: str) -> EntryMeta:
    """Freeze the metadata for an already-resolved absolute path."""
    parts = paths.decompose(resolved)
    return EntryMeta(
        supplied=supplied,
        path=resolved,
        url=paths.to_locator(resolved),
        name=parts.base,
        stem=parts.stem,
        extension=parts.extension,
        root=parts.root,
        directory=parts.directory,
        sep=os.sep,
        trail=tuple(resolved.split(os.sep)),
    )


def _wrap_os_error(error: OSError, action: str, path: str) -> CapFSError:
    if isinstance(error, FileNotFoundError):
        return NotFoundError(f"No such resource '{path}' ({action})", path=path, cause=error)
    return InvalidStateError(
        f"Unable to {action} '{path}': {error.strerror or error}",
        path=path,
        cause=error,
    )


# ========== Enumeration ==========


def _scan(path: str, pattern: Optional[str], include_hidden: bool) -> List[_Found]:
    found = []
    with os.scandir(path) as entries:
        for entry in entries:
            if pattern:
                if entry.name.startswith(".") and not (include_hidden or pattern.startswith(".")):
                    continue
                if not fnmatch.fnmatch(entry.name, pattern):
                    continue
            found.append((path, entry.name, entry.is_dir(), entry.is_file()))
    return found


def _match(path: str, pattern: str, include_hidden: bool) -> List[_Found]:
    if not os.path.isdir(path):
        raise FileNotFoundError(2, "No such directory", path)

    separators = os.sep + (os.altsep or "")
    found = []
    for match in globbing.glob(
        pattern, root_dir=path, recursive=True, include_hidden=include_hidden
    ):
        full = os.path.join(path, match.rstrip(separators))
        parent, name = os.path.split(full)
        if not name:
            continue
        found.append((parent, name, os.path.isdir(full), os.path.isfile(full)))
    return found


async def enumerate_directory(
    path: str,
    make_directory: Callable[[str, str], D],
    make_file: Callable[[str, str], F],
    pattern: Optional[str] = None,
    recursive: bool = False,
) -> Listing[D, F]:
    """
    List the children of a real directory and wrap them with the given factories.

    Each factory receives the absolute parent directory of the match and the
    match's name, so matches from any depth are rebuilt from where they were
    found rather than from the pattern.

    Args:
        path: Absolute path of the directory to enumerate
        make_directory: Factory for child directories
        make_file: Factory for child files
        pattern: Glob pattern; without one every direct child is listed
        recursive: Match the pattern at any depth (``**`` supported)

    Returns:
        Listing of wrapped files and directories

    Raises:
        NotFoundError: If the directory does not exist
        InvalidStateError: If it cannot be listed
    """
    include_hidden = get_config().include_hidden

    try:
        if recursive:
            found = await asyncio.to_thread(_match, path, pattern or "*", include_hidden)
        else:
            found = await asyncio.to_thread(_scan, path, pattern, include_hidden)
    except OSError as e:
        raise _wrap_os_error(e, "list directory", path) from e

    listing: Listing[D, F] = Listing()
    for parent, name, is_directory, is_file in found:
        if is_directory:
            listing.directories.append(make_directory(parent, name))
        elif is_file:
            listing.files.append(make_file(parent, name))
        else:
            logger.debug(f"Skipping {os.path.join(parent, name)}: neither file nor directory")

    logger.debug(
        f"Enumerated {path} (pattern={pattern!r}, recursive={recursive}): "
        f"{len(listing.files)} files, {len(listing.directories)} directories"
    )
    return listing


# ========== Entries ==========


class Entry:
    """Common metadata accessors for directory and file entries."""

    is_directory = False
    is_file = False
    is_virtual = False

    _meta: EntryMeta

    @property
    def meta(self) -> EntryMeta:
        """The frozen metadata of this entry."""
        return self._meta

    @property
    def supplied(self) -> Optional[str]:
        """The path as passed to the constructor."""
        return self._meta.supplied

    @property
    def path(self) -> str:
        """Absolute, normalized path."""
        return self._meta.path

    @property
    def url(self) -> str:
        """file:// locator for the path."""
        return self._meta.url

    @property
    def name(self) -> str:
        return self._meta.name

    @property
    def stem(self) -> str:
        return self._meta.stem

    @property
    def extension(self) -> str:
        return self._meta.extension

    @property
    def sep(self) -> str:
        return self._meta.sep

    @property
    def trail(self) -> Tuple[str, ...]:
        return self._meta.trail

    def relative_to(self, other: "Entry") -> str:
        """
        Relative path from another entry to this one.

        Directories are measured from themselves, files from their directory.
        Returns this entry's absolute path when it is not reachable without ``..``.
        """
        assert_type(other, Entry, name="other")
        base = other.path if other.is_directory else os.path.dirname(other.path)
        return paths.relative_or_absolute(base, self.path)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.path))

    def __str__(self) -> str:
        return f"[{type(self).__name__}: {self.path}]"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.path!r})"


class DirectoryEntry(Entry):
    """
    A directory on the host filesystem.

    Attributes:
        path: Absolute resolved path
        parent: Parent directory, computed once on first access (None at the root)
    """

    is_directory = True

    def __init__(self, supplied: Optional[str] = None):
        """
        Resolve ``supplied`` against the current working directory.

        Args:
            supplied: Directory path; empty or None means the working directory
        """
        assert_type(supplied, Optional[str], allow_empty=True, name="supplied")

        normalized = paths.normalize_separators(supplied or "")
        resolved = paths.resolve(paths.cwd(), normalized or os.curdir)

        self._meta = build_meta(supplied, resolved)

    @classmethod
    def from_cwd(cls) -> "DirectoryEntry":
        """Create an entry for the current working directory."""
        return cls(paths.cwd())

    # ---- Factories used for every child this directory produces ----

    def _make_directory(self, path: str) -> "DirectoryEntry":
        return DirectoryEntry(path)

    def _make_file(self, path: str) -> "FileEntry":
        parent = self if os.path.dirname(path) == self.path else None
        return FileEntry(path, parent)

    # ---- Structure ----

    @property
    def parent_path(self) -> Optional[str]:
        """Directory name of the resolved path, or None at the filesystem root."""
        directory = os.path.dirname(self.path)
        return None if directory == self.path else directory

    @cached_property
    def parent(self) -> Optional["DirectoryEntry"]:
        """The parent directory (None at the filesystem root)."""
        parent_path = self.parent_path
        if parent_path is None:
            return None
        return self._make_directory(parent_path)

    def walk_up(self) -> Iterator["DirectoryEntry"]:
        """
        Yield this directory, then each ancestor up to the filesystem root.

        Every call returns a new, independent iterator.
        """
        current: Optional[DirectoryEntry] = self
        while current is not None:
            yield current
            current = current.parent

    def get_directory(self, path: str) -> "DirectoryEntry":
        """
        Create a directory entry by extending this directory's path.

        Overlapping segments are merged, so ``/projects/app`` extended with
        ``app/src`` yields ``/projects/app/src``.
        """
        assert_type(path, str, name="path")
        return self._make_directory(paths.merge_overlapping(self.path, path))

    def get_file(self, filename: str) -> "FileEntry":
        """Create a file entry by extending this directory's path."""
        assert_type(filename, str, name="filename")
        return self._make_file(paths.merge_overlapping(self.path, filename))

    # ---- I/O ----

    async def exists(self) -> bool:
        """Whether the directory exists and can be opened. Never raises."""
        try:
            (await aiofiles.os.scandir(self.path)).close()
            return True
        except (OSError, ValueError):
            return False

    async def has_file(self, filename: str) -> bool:
        """Whether a file of that name exists in this directory."""
        return await self.get_file(filename).exists()

    async def has_directory(self, dirname: str) -> bool:
        """Whether a subdirectory of that name exists in this directory."""
        return await self.get_directory(dirname).exists()

    async def read(self, pattern: Optional[str] = None) -> Listing["DirectoryEntry", "FileEntry"]:
        """
        List the direct children of this directory.

        Args:
            pattern: Optional glob pattern matched against child names only
                (e.g. ``"*.txt"``)

        Returns:
            Listing with ``files`` and ``directories``
        """
        assert_type(pattern, Optional[str], name="pattern")
        return await enumerate_directory(
            self.path,
            lambda parent, name: self._make_directory(os.path.join(parent, name)),
            lambda parent, name: self._make_file(os.path.join(parent, name)),
            pattern=pattern,
        )

    async def glob(self, pattern: str) -> Listing["DirectoryEntry", "FileEntry"]:
        """
        Recursively search this directory tree for entries matching a pattern.

        Args:
            pattern: Glob pattern relative to this directory (e.g. ``"**/*.py"``)

        Returns:
            Listing with ``files`` and ``directories``
        """
        assert_type(pattern, str, name="pattern")
        return await enumerate_directory(
            self.path,
            lambda parent, name: self._make_directory(os.path.join(parent, name)),
            lambda parent, name: self._make_file(os.path.join(parent, name)),
            pattern=pattern,
            recursive=True,
        )

    async def assure_exists(self, parents: bool = False, mode: int = 0o777) -> None:
        """
        Create the directory if it does not exist.

        Args:
            parents: Also create missing parent directories
            mode: Permission bits for created directories

        Raises:
            InvalidStateError: If creation fails for any reason other than the
                directory already existing
        """
        if await self.exists():
            return

        try:
            if parents:
                await aiofiles.os.makedirs(self.path, mode=mode, exist_ok=True)
            else:
                await aiofiles.os.mkdir(self.path, mode=mode)
            logger.debug(f"Created directory {self.path}")
        except FileExistsError:
            return
        except OSError as e:
            raise InvalidStateError(
                f"Unable to create directory '{self.path}': {e.strerror or e}",
                path=self.path,
                cause=e,
            ) from e

    async def delete(self) -> None:
        """
        Delete this directory. Only empty directories can be deleted.

        Raises:
            NotFoundError: If the directory does not exist
            InvalidStateError: If it is not empty or cannot be removed
        """
        if not await self.exists():
            raise NotFoundError(f"No such directory '{self.path}'", path=self.path)

        try:
            await aiofiles.os.rmdir(self.path)
            logger.debug(f"Deleted directory {self.path}")
        except OSError as e:
            raise _wrap_os_error(e, "delete directory", self.path) from e


class FileEntry(Entry):
    """
    A file on the host filesystem.

    Attributes:
        path: Absolute resolved path
        parent: The directory containing this file (it need not exist)
    """

    is_file = True

    def __init__(
        self,
        path: str,
        parent: Union[None, str, DirectoryEntry] = None,
    ):
        """
        Resolve the file path.

        Args:
            path: File path. Relative paths resolve against ``parent`` (or the
                working directory); an absolute path given together with a
                parent it does not lie in is re-rooted under that parent.
            parent: Containing directory as a path string or DirectoryEntry
        """
        assert_type(path, str, name="path")
        assert_type(parent, Union[None, str, DirectoryEntry], name="parent")

        normalized = paths.normalize_separators(path)

        if parent is None:
            resolved = paths.resolve(paths.cwd(), normalized)
            parent_entry = DirectoryEntry(os.path.dirname(resolved))
        else:
            base = DirectoryEntry(parent) if isinstance(parent, str) else parent
            resolved = self._resolve_under(base.path, normalized)
            directory = os.path.dirname(resolved)
            parent_entry = base if base.path == directory else DirectoryEntry(directory)

        self._meta = build_meta(path, resolved)
        self._parent = parent_entry

    @staticmethod
    def _resolve_under(base: str, path: str) -> str:
        if os.path.isabs(path):
            if paths.contains(base, path):
                return path
            root = paths.decompose(path).root
            path = path[len(root):]
        return paths.resolve(base, path)

    @property
    def parent(self) -> DirectoryEntry:
        """The directory containing this file."""
        return self._parent

    @property
    def parent_path(self) -> str:
        return self._parent.path

    # ---- Probes (never raise) ----

    async def exists(self) -> bool:
        try:
            await aiofiles.os.stat(self.path)
            return True
        except (OSError, ValueError):
            return False

    async def can_read(self) -> bool:
        try:
            return await aiofiles.os.access(self.path, os.R_OK)
        except (OSError, ValueError):
            return False

    async def can_write(self) -> bool:
        try:
            return await aiofiles.os.access(self.path, os.W_OK)
        except (OSError, ValueError):
            return False

    async def size(self) -> Optional[int]:
        """Size in bytes, or None if the file cannot be stat'ed."""
        try:
            return (await aiofiles.os.stat(self.path)).st_size
        except (OSError, ValueError):
            return None

    async def modified(self) -> Optional[datetime]:
        """Last modification time (UTC), or None if the file cannot be stat'ed."""
        try:
            stat = await aiofiles.os.stat(self.path)
        except (OSError, ValueError):
            return None
        return datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)

    # ---- Content ----

    async def _require_exists(self) -> None:
        if not await self.exists():
            raise NotFoundError(f"No such file '{self.path}'", path=self.path)

    async def _require_parent(self) -> None:
        if not await self._parent.exists():
            raise InvalidStateError(
                f"Invalid directory writing '{self.path}': "
                f"'{self._parent.path}' does not exist",
                path=self.path,
                suggestion="Create the parent directory with assure_exists() first.",
            )

    async def read(self, encoding: Optional[str] = None) -> str:
        """
        Read the file as text.

        Raises:
            NotFoundError: If the file does not exist
            ContentUnparseableError: If the content cannot be decoded
        """
        assert_type(encoding, Optional[str], name="encoding")
        encoding = encoding or get_config().default_encoding
        await self._require_exists()

        try:
            async with aiofiles.open(self.path, "r", encoding=encoding) as f:
                content = await f.read()
        except UnicodeDecodeError as e:
            raise ContentUnparseableError(
                f"Unable to decode '{self.path}' as {encoding}",
                path=self.path,
                cause=e,
            ) from e
        except LookupError as e:
            raise InvalidArgumentError(f"Unknown encoding '{encoding}'", cause=e) from e
        except OSError as e:
            raise _wrap_os_error(e, "read file", self.path) from e

        logger.debug(f"Read {len(content)} characters from {self.path}")
        return content

    async def read_binary(self) -> bytes:
        """
        Read the file as bytes.

        Raises:
            NotFoundError: If the file does not exist
        """
        await self._require_exists()

        try:
            async with aiofiles.open(self.path, "rb") as f:
                data = await f.read()
        except OSError as e:
            raise _wrap_os_error(e, "read file", self.path) from e

        logger.debug(f"Read {len(data)} bytes from {self.path}")
        return data

    async def write(self, content: str, encoding: Optional[str] = None) -> None:
        """
        Write text to the file, replacing any existing content.

        Raises:
            InvalidStateError: If the parent directory does not exist or the
                write fails
        """
        assert_type(content, str, allow_empty=True, name="content")
        assert_type(encoding, Optional[str], name="encoding")
        encoding = encoding or get_config().default_encoding
        await self._require_parent()

        try:
            async with aiofiles.open(self.path, "w", encoding=encoding) as f:
                await f.write(content)
        except LookupError as e:
            raise InvalidArgumentError(f"Unknown encoding '{encoding}'", cause=e) from e
        except (OSError, UnicodeEncodeError) as e:
            raise InvalidStateError(
                f"Failed to write file '{self.path}': {e}", path=self.path, cause=e
            ) from e

        logger.debug(f"Wrote {len(content)} characters to {self.path}")

    async def write_binary(self, data: Union[bytes, bytearray, memoryview, array.array]) -> None:
        """
        Write binary data to the file, replacing any existing content.

        Args:
            data: bytes, bytearray, memoryview or array.array

        Raises:
            InvalidArgumentError: If ``data`` is not one of the binary types
            InvalidStateError: If the parent directory does not exist or the
                write fails
        """
        if not isinstance(data, BINARY_TYPES):
            raise InvalidArgumentError(
                "Data must be binary (bytes, bytearray, memoryview or array.array), "
                f"got {type(data).__name__}",
                path=self.path,
            )
        await self._require_parent()

        try:
            async with aiofiles.open(self.path, "wb") as f:
                await f.write(data)
        except OSError as e:
            raise InvalidStateError(
                f"Failed to write file '{self.path}': {e}", path=self.path, cause=e
            ) from e

        logger.debug(f"Wrote binary data to {self.path}")

    async def load_data(self, type: Optional[str] = None, encoding: Optional[str] = None) -> Any:
        """
        Read and parse the file as structured data.

        Args:
            type: ``json5``, ``json``, ``yaml`` or ``any`` (case-insensitive).
                ``any`` tries JSON5, then YAML.
            encoding: Text encoding

        Returns:
            The first successful parse result

        Raises:
            InvalidArgumentError: If ``type`` is not recognized
            ContentUnparseableError: If every parser for ``type`` fails
        """
        assert_type(type, Optional[str], name="type")
        data_type = type or get_config().default_data_type
        parsers = parsers_for(data_type)
        content = await self.read(encoding)

        last_error: Optional[Exception] = None
        for parse in parsers:
            try:
                return parse(content)
            except PARSE_ERRORS as e:
                logger.debug(f"{getattr(parse, '__module__', parse)} could not parse {self.path}: {e}")
                last_error = e

        raise ContentUnparseableError(
            f"Content is not valid {data_type.lower()} data: '{self.path}'",
            path=self.path,
            context={"data_type": data_type},
            cause=last_error,
        )

    async def import_module(self) -> ModuleType:
        """
        Load the file as a Python module.

        Raises:
            NotFoundError: If the file does not exist
            ContentUnparseableError: If the module has a syntax error
            InvalidStateError: If loading or executing the module fails
        """
        await self._require_exists()

        spec = importlib.util.spec_from_file_location(self.stem, self.path)
        if spec is None or spec.loader is None:
            raise InvalidStateError(
                f"Unable to import '{self.path}': no module loader for '{self.extension}'",
                path=self.path,
            )

        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except SyntaxError as e:
            raise ContentUnparseableError(
                f"Unable to import '{self.path}': {e.msg}", path=self.path, cause=e
            ) from e
        except Exception as e:
            raise InvalidStateError(
                f"Unable to import '{self.path}': {e}", path=self.path, cause=e
            ) from e

        return module

    async def delete(self) -> None:
        """
        Delete the file.

        Raises:
            NotFoundError: If the file does not exist
        """
        await self._require_exists()

        try:
            await aiofiles.os.remove(self.path)
            logger.debug(f"Deleted file {self.path}")
        except OSError as e:
            raise _wrap_os_error(e, "delete file", self.path) from e
