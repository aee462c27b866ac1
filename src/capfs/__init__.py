"""
capfs - capped filesystem access

Asynchronous directory and file entries with a path algebra, pluggable data
loaders, and a virtual overlay that confines every path to a capped
directory tree.
"""

__version__ = "0.1.0"

# Configuration
from .config import FileSystemConfig, configure, get_config, set_config

# Errors
from .exceptions import (
    CapFSError,
    ContentUnparseableError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
)

# Entries
from .filesystem import (
    DataCache,
    DirectoryEntry,
    FileEntry,
    Listing,
    TempDirectory,
    VirtualDirectory,
    VirtualFile,
)
from .utils import init_logging

__all__ = [
    # Version
    "__version__",
    # Configuration
    "FileSystemConfig",
    "configure",
    "get_config",
    "set_config",
    # Errors
    "CapFSError",
    "ContentUnparseableError",
    "InvalidArgumentError",
    "InvalidStateError",
    "NotFoundError",
    # Entries
    "DataCache",
    "DirectoryEntry",
    "FileEntry",
    "Listing",
    "TempDirectory",
    "VirtualDirectory",
    "VirtualFile",
    # Logging
    "init_logging",
]
