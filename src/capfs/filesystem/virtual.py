"""Virtual entries confined to a capped directory tree.

Agent-facing paths are virtual POSIX paths rooted at '/', the cap. Every
virtual entry also holds a real entry that is used for actual I/O.

The real path of a virtual entry is always the cap's real path joined with
the virtual path's segments, and virtual paths are normalized lexically with
'..' stopping at '/'. A virtual entry therefore cannot name anything outside
its cap, whatever fragment it was built from.

Example:
    >>> cap = VirtualDirectory("/tmp/run-123")
    >>> data = cap.get_directory("data")
    >>> data.path
    '/data'
    >>> data.real.path
    '/tmp/run-123/data'
    >>> data.get_directory("../../etc").real.path
    '/tmp/run-123/etc'
"""

from __future__ import annotations

import logging
import os
import posixpath
from datetime import datetime
from types import ModuleType
from typing import Any, Iterator, Optional, Tuple, Union

from ..exceptions import InvalidArgumentError
from ..validation import assert_type
from . import paths
from .data_models import Listing
from .entries import BINARY_TYPES, DirectoryEntry, FileEntry, enumerate_directory

logger = logging.getLogger(__name__)

VIRTUAL_ROOT = "/"


def resolve_virtual(base: str, fragment: str) -> str:
    """
    Resolve a fragment against a virtual directory path.

    A leading separator on the fragment is dropped, so ``/config`` means
    ``config`` relative to ``base``. '..' never climbs above the root.

    Args:
        base: Virtual path of the directory to resolve from
        fragment: Path fragment supplied by the caller

    Returns:
        Canonical virtual path, always starting with '/'
    """
    relative = fragment.replace("\\", "/").lstrip("/")
    if not relative:
        return base

    resolved = paths.resolve(base, relative).replace(os.sep, "/")
    normalized = posixpath.normpath(VIRTUAL_ROOT + resolved.lstrip("/"))
    # POSIX keeps a leading '//'
    return VIRTUAL_ROOT + normalized.lstrip("/")


def real_path_for(cap: "VirtualDirectory", virtual_path: str) -> str:
    """Map a virtual path inside ``cap`` to its real filesystem path."""
    segments = [segment for segment in virtual_path.split("/") if segment]
    cap_path = cap.real.path
    return os.path.join(cap_path, *segments) if segments else cap_path


def check_pattern(pattern: str) -> None:
    """
    Reject glob patterns that could match outside the directory they run in.

    Raises:
        InvalidArgumentError: If the pattern is absolute or has a '..' segment
    """
    segments = pattern.replace("\\", "/").split("/")
    if os.path.isabs(pattern) or pattern.startswith(("/", "\\")) or os.pardir in segments:
        raise InvalidArgumentError(
            f"Pattern '{pattern}' must be relative and must not contain '..'",
            context={"pattern": pattern},
        )


def _is_within(ancestor: str, virtual_path: str) -> bool:
    return ancestor == VIRTUAL_ROOT or virtual_path == ancestor or virtual_path.startswith(ancestor + "/")


class VirtualDirectory:
    """
    A directory inside a capped tree.

    A VirtualDirectory built without a parent is the cap: its virtual path is
    '/' and ``cap`` refers to itself. Every directory built from it shares
    that same cap instance.

    Attributes:
        path: Virtual path ('/' for the cap)
        real: DirectoryEntry used for I/O
        parent: The structural parent passed at construction (None for the cap)
        cap: Root of the tree
    """

    is_directory = True
    is_file = False
    is_virtual = True

    def __init__(
        self,
        fragment: Optional[str] = None,
        parent: Optional["VirtualDirectory"] = None,
    ):
        """
        Create a cap, or a directory below an existing virtual directory.

        Args:
            fragment: Without a parent, the real directory to cap (defaults to
                the working directory). With a parent, a path relative to it.
            parent: Structural parent directory
        """
        assert_type(fragment, Optional[str], allow_empty=True, name="fragment")
        assert_type(parent, Optional[VirtualDirectory], name="parent")

        if parent is None:
            self._setup(fragment, VIRTUAL_ROOT, None, real=DirectoryEntry(fragment))
        else:
            self._setup(fragment, resolve_virtual(parent.path, fragment or ""), parent)

    def _setup(
        self,
        supplied: Optional[str],
        virtual_path: str,
        parent: Optional["VirtualDirectory"],
        real: Optional[DirectoryEntry] = None,
    ) -> None:
        self._supplied = supplied
        self._path = virtual_path
        self._parent = parent
        self._cap = self if parent is None else parent.cap
        self._real = real if real is not None else DirectoryEntry(real_path_for(self._cap, virtual_path))

    @classmethod
    def _at(cls, parent: "VirtualDirectory", virtual_path: str) -> "VirtualDirectory":
        # Child with an already-canonical virtual path (used for enumeration results)
        directory = cls.__new__(cls)
        directory._setup(posixpath.basename(virtual_path), virtual_path, parent)
        return directory

    @classmethod
    def from_cwd(cls) -> "VirtualDirectory":
        """Create a cap at the current working directory."""
        return cls(paths.cwd())

    # ---- Coordinates ----

    @property
    def supplied(self) -> Optional[str]:
        return self._supplied

    @property
    def path(self) -> str:
        """Virtual path relative to the cap."""
        return self._path

    @property
    def real(self) -> DirectoryEntry:
        """The backing entry at the real path; use it to step outside the cap deliberately."""
        return self._real

    @property
    def cap(self) -> "VirtualDirectory":
        return self._cap

    @property
    def is_cap(self) -> bool:
        return self._parent is None

    @property
    def parent(self) -> Optional["VirtualDirectory"]:
        """The structural parent passed at construction."""
        return self._parent

    @property
    def parent_path(self) -> Optional[str]:
        return self._parent.path if self._parent is not None else None

    @property
    def name(self) -> str:
        return posixpath.basename(self._path)

    @property
    def stem(self) -> str:
        return posixpath.splitext(self.name)[0]

    @property
    def extension(self) -> str:
        return posixpath.splitext(self.name)[1]

    @property
    def url(self) -> str:
        return self._real.url

    @property
    def sep(self) -> str:
        return "/"

    @property
    def trail(self) -> Tuple[str, ...]:
        return tuple(self._path.split("/"))

    def walk_up(self) -> Iterator["VirtualDirectory"]:
        """Yield this directory, then each structural parent up to and including the cap."""
        current: Optional[VirtualDirectory] = self
        while current is not None:
            yield current
            current = current.parent

    def get_directory(self, fragment: str) -> "VirtualDirectory":
        """Create a virtual directory below this one."""
        assert_type(fragment, str, name="fragment")
        return VirtualDirectory(fragment, self)

    def get_file(self, fragment: str) -> "VirtualFile":
        """Create a virtual file below this one (the fragment may be nested)."""
        assert_type(fragment, str, name="fragment")
        return VirtualFile(fragment, self)

    def relative_to(self, other: Union["VirtualDirectory", "VirtualFile"]) -> str:
        """Relative virtual path from another virtual entry to this one."""
        assert_type(other, Union[VirtualDirectory, VirtualFile], name="other")
        base = other.path if other.is_directory else posixpath.dirname(other.path)
        relative = posixpath.relpath(self._path, base)
        return self._path if relative.startswith("..") else relative

    # ---- Enumeration ----

    def _virtual_of(self, real_path: str) -> str:
        relative = os.path.relpath(real_path, self._real.path)
        if relative == os.curdir:
            return self._path
        return posixpath.join(self._path, relative.replace(os.sep, "/"))

    def _make_directory(self, real_parent: str, name: str) -> "VirtualDirectory":
        return VirtualDirectory._at(self, self._virtual_of(os.path.join(real_parent, name)))

    def _make_file(self, real_parent: str, name: str) -> "VirtualFile":
        if real_parent == self._real.path:
            parent = self
        else:
            parent = VirtualDirectory._at(self, self._virtual_of(real_parent))
        return VirtualFile._at(parent, posixpath.join(parent.path, name))

    async def read(self, pattern: Optional[str] = None) -> Listing["VirtualDirectory", "VirtualFile"]:
        """List the direct children of this directory as virtual entries."""
        assert_type(pattern, Optional[str], name="pattern")
        if pattern:
            check_pattern(pattern)
        return await enumerate_directory(
            self._real.path,
            self._make_directory,
            self._make_file,
            pattern=pattern,
        )

    async def glob(self, pattern: str) -> Listing["VirtualDirectory", "VirtualFile"]:
        """
        Recursively search below this directory; matches become virtual entries.

        Raises:
            InvalidArgumentError: If the pattern is absolute or contains '..'
        """
        assert_type(pattern, str, name="pattern")
        check_pattern(pattern)
        return await enumerate_directory(
            self._real.path,
            self._make_directory,
            self._make_file,
            pattern=pattern,
            recursive=True,
        )

    # ---- I/O delegated to the real entry ----

    async def exists(self) -> bool:
        return await self._real.exists()

    async def has_file(self, filename: str) -> bool:
        """Whether a file exists at ``filename``; False when it cannot name a file."""
        assert_type(filename, str, name="filename")
        try:
            file = self.get_file(filename)
        except InvalidArgumentError:
            return False
        return await file.exists()

    async def has_directory(self, dirname: str) -> bool:
        return await self.get_directory(dirname).exists()

    async def assure_exists(self, parents: bool = False, mode: int = 0o777) -> None:
        await self._real.assure_exists(parents=parents, mode=mode)

    async def delete(self) -> None:
        await self._real.delete()

    # ---- Dunder ----

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._path == other.path and self._cap.real.path == other.cap.real.path

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._path, self._cap.real.path))

    def __str__(self) -> str:
        return f"[{type(self).__name__}: {self._path} -> {self._real.path}]"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._path!r}, real={self._real.path!r})"


class VirtualFile:
    """
    A file inside a capped tree.

    Attributes:
        path: Virtual path relative to the cap
        real: FileEntry used for I/O
        parent: Virtual directory containing the file
        cap: Root of the tree
    """

    is_directory = False
    is_file = True
    is_virtual = True

    def __init__(self, fragment: str, parent: VirtualDirectory):
        """
        Create a file below a virtual directory.

        Args:
            fragment: File path relative to ``parent``; may be nested
                (``"data/config.yaml"``)
            parent: Virtual directory to resolve from
        """
        assert_type(fragment, str, name="fragment")
        assert_type(parent, VirtualDirectory, name="parent")

        virtual_path = resolve_virtual(parent.path, fragment)
        if virtual_path == VIRTUAL_ROOT:
            raise InvalidArgumentError(
                f"'{fragment}' does not name a file below '{parent.path}'",
                context={"fragment": fragment},
            )

        directory = posixpath.dirname(virtual_path)
        if directory == parent.path:
            container = parent
        elif directory == VIRTUAL_ROOT:
            container = parent.cap
        elif _is_within(parent.path, directory):
            container = VirtualDirectory._at(parent, directory)
        else:
            container = VirtualDirectory._at(parent.cap, directory)

        self._setup(fragment, virtual_path, container)

    def _setup(self, supplied: str, virtual_path: str, parent: VirtualDirectory) -> None:
        self._supplied = supplied
        self._path = virtual_path
        self._parent = parent
        self._real = FileEntry(real_path_for(parent.cap, virtual_path), parent.real)

    @classmethod
    def _at(cls, parent: VirtualDirectory, virtual_path: str) -> "VirtualFile":
        file = cls.__new__(cls)
        file._setup(posixpath.basename(virtual_path), virtual_path, parent)
        return file

    # ---- Coordinates ----

    @property
    def supplied(self) -> str:
        return self._supplied

    @property
    def path(self) -> str:
        return self._path

    @property
    def real(self) -> FileEntry:
        return self._real

    @property
    def cap(self) -> VirtualDirectory:
        return self._parent.cap

    @property
    def parent(self) -> VirtualDirectory:
        return self._parent

    @property
    def parent_path(self) -> str:
        return self._parent.path

    @property
    def name(self) -> str:
        return posixpath.basename(self._path)

    @property
    def stem(self) -> str:
        return posixpath.splitext(self.name)[0]

    @property
    def extension(self) -> str:
        return posixpath.splitext(self.name)[1]

    @property
    def url(self) -> str:
        return self._real.url

    def relative_to(self, other: Union[VirtualDirectory, "VirtualFile"]) -> str:
        assert_type(other, Union[VirtualDirectory, VirtualFile], name="other")
        base = other.path if other.is_directory else posixpath.dirname(other.path)
        relative = posixpath.relpath(self._path, base)
        return self._path if relative.startswith("..") else relative

    # ---- I/O delegated to the real entry ----

    async def exists(self) -> bool:
        return await self._real.exists()

    async def can_read(self) -> bool:
        return await self._real.can_read()

    async def can_write(self) -> bool:
        return await self._real.can_write()

    async def size(self) -> Optional[int]:
        return await self._real.size()

    async def modified(self) -> Optional[datetime]:
        return await self._real.modified()

    async def read(self, encoding: Optional[str] = None) -> str:
        return await self._real.read(encoding)

    async def read_binary(self) -> bytes:
        return await self._real.read_binary()

    async def write(self, content: str, encoding: Optional[str] = None) -> None:
        await self._real.write(content, encoding)

    async def write_binary(self, data: Union[BINARY_TYPES]) -> None:
        await self._real.write_binary(data)

    async def load_data(self, type: Optional[str] = None, encoding: Optional[str] = None) -> Any:
        return await self._real.load_data(type, encoding)

    async def import_module(self) -> ModuleType:
        return await self._real.import_module()

    async def delete(self) -> None:
        await self._real.delete()

    # ---- Dunder ----

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._path == other.path and self.cap.real.path == other.cap.real.path

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._path, self.cap.real.path))

    def __str__(self) -> str:
        return f"[{type(self).__name__}: {self._path} -> {self._real.path}]"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._path!r}, real={self._real.path!r})"
