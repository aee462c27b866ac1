"""
Data models for filesystem entries.

Immutable value types shared by the path algebra, the plain entries and the
virtual overlay.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Generic, List, Optional, Tuple, TypeVar

if TYPE_CHECKING:
    from .entries import DirectoryEntry, FileEntry
    from .virtual import VirtualDirectory, VirtualFile


@dataclass(frozen=True)
class PathParts:
    """
    Structural decomposition of a path.

    Attributes:
        root: Filesystem root of the path ('/' on POSIX, '' if relative)
        directory: Everything before the final segment
        base: Final segment including its extension
        stem: Final segment without its extension
        extension: Substring after the final '.' of base, including the dot
    """

    root: str
    directory: str
    base: str
    stem: str
    extension: str


@dataclass(frozen=True)
class EntryMeta:
    """
    Resolved metadata of one filesystem entry, built once at construction.

    Attributes:
        supplied: The path exactly as passed to the constructor
        path: Absolute, separator-normalized path
        url: file:// locator for the path
        name: Final segment of the path
        stem: Name without extension
        extension: Extension of the name, including the dot ('' if none)
        root: Filesystem root of the path
        directory: Directory portion of the path
        sep: Platform path separator
        trail: Path split on the separator
    """

    supplied: Optional[str]
    path: str
    url: str
    name: str
    stem: str
    extension: str
    root: str
    directory: str
    sep: str
    trail: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "supplied": self.supplied,
            "path": self.path,
            "url": self.url,
            "name": self.name,
            "stem": self.stem,
            "extension": self.extension,
            "root": self.root,
            "directory": self.directory,
            "sep": self.sep,
            "trail": list(self.trail),
        }


D = TypeVar("D")
F = TypeVar("F")


@dataclass
class Listing(Generic[D, F]):
    """Result of enumerating a directory: child files and child directories."""

    files: List[F] = field(default_factory=list)
    directories: List[D] = field(default_factory=list)

    def __iter__(self):
        # Allows ``files, directories = await directory.read()``
        yield self.files
        yield self.directories

    def __len__(self) -> int:
        return len(self.files) + len(self.directories)


PlainListing = Listing["DirectoryEntry", "FileEntry"]
VirtualListing = Listing["VirtualDirectory", "VirtualFile"]
