"""Filesystem entries, the path algebra and the virtual overlay."""

from . import paths
from .cache import DataCache
from .data_models import EntryMeta, Listing, PathParts
from .entries import DirectoryEntry, FileEntry, enumerate_directory
from .loaders import DATA_LOADERS
from .temp import TempDirectory
from .virtual import VirtualDirectory, VirtualFile

__all__ = [
    "paths",
    "DATA_LOADERS",
    "DataCache",
    "DirectoryEntry",
    "EntryMeta",
    "FileEntry",
    "Listing",
    "PathParts",
    "TempDirectory",
    "VirtualDirectory",
    "VirtualFile",
    "enumerate_directory",
]
