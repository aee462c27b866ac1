"""
capfs Exception Hierarchy

This module defines the error taxonomy for the filesystem-access layer. Every
failure raised by an entry carries a human-readable message, the offending
path where one exists, and the wrapped native cause for diagnostics.

The hierarchy is:
- CapFSError: base class with error code, context and cause chain
- NotFoundError: target absent for an operation that requires it
- InvalidArgumentError: malformed argument rejected before any I/O
- InvalidStateError: filesystem state prevents the operation
- ContentUnparseableError: no registered parser accepted the content
"""

import sys
import time
import traceback
from typing import Any, Dict, List, Optional

from rich.console import Console


class CapFSError(Exception):
    """
    Base exception class for all capfs errors.

    Attributes:
        error_code: Unique error code for programmatic handling
        path: Path the failing operation was acting on (if applicable)
        timestamp: When the error occurred
        context: Additional context information
        suggestion: Suggested fix or next steps (if applicable)
    """

    default_code = "CAPFS_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        path: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        suggestion: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        """
        Initialize the error.

        Args:
            message: Technical error message
            error_code: Unique error code (defaults to the class code)
            path: Path the operation was acting on
            context: Additional context information
            suggestion: Suggested fix or next steps
            cause: Native exception being wrapped
        """
        super().__init__(message)
        self.error_code = error_code or self.default_code
        self.path = path
        self.timestamp = time.time()
        self.context = context or {}
        self.suggestion = suggestion
        self.message = message
        if cause is not None:
            self.__cause__ = cause

    @property
    def cause(self) -> Optional[BaseException]:
        """The wrapped native exception, if any."""
        return self.__cause__

    @property
    def trace(self) -> List[str]:
        """Messages along the cause chain, outermost first."""
        lines = []
        current: Optional[BaseException] = self
        seen = set()
        while current is not None and id(current) not in seen:
            seen.add(id(current))
            if isinstance(current, CapFSError):
                lines.append(current.message)
            else:
                lines.append(f"{type(current).__name__}: {current}")
            current = current.__cause__
        return lines

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "path": self.path,
            "timestamp": self.timestamp,
            "context": self.context,
            "suggestion": self.suggestion,
            "cause": repr(self.cause) if self.cause is not None else None,
        }

    def report(self, verbose: bool = False, console: Optional[Console] = None) -> None:
        """
        Render the error trace to the terminal.

        Args:
            verbose: Also print the traceback of the wrapped cause
            console: Console to print to (defaults to stderr)
        """
        console = console or Console(file=sys.stderr)
        console.print(f"[bold red]\\[error][/bold red] {self.error_code}")
        for depth, line in enumerate(self.trace):
            prefix = "  " * depth + ("* " if depth else "")
            console.print(f"{prefix}{line}", markup=False, highlight=False)
        if self.suggestion:
            console.print(f"[yellow]Suggestion:[/yellow] {self.suggestion}")
        if verbose and self.cause is not None:
            console.print("[bold red]\\[error][/bold red] Caused by")
            console.print(
                "".join(traceback.format_exception(self.cause)).rstrip(),
                markup=False,
                highlight=False,
            )

    def __str__(self) -> str:
        parts = [f"[{self.error_code}]", self.message]
        return " ".join(parts)


class NotFoundError(CapFSError):
    """
    Raised when the target of a read, delete or import does not exist.

    Examples:
    - Reading a file that was never written
    - Deleting a directory twice
    """

    default_code = "NOT_FOUND"


class InvalidArgumentError(CapFSError):
    """
    Raised when an argument is rejected before any I/O is attempted.

    Examples:
    - A path that is not a string, or an empty one
    - An unsupported load_data type token
    - A non-binary payload passed to write_binary
    """

    default_code = "INVALID_ARGUMENT"


class InvalidStateError(CapFSError):
    """
    Raised when the filesystem is not in a state that permits the operation.

    Examples:
    - Writing a file whose parent directory does not exist
    - Creating a directory fails for a reason other than it already existing
    """

    default_code = "INVALID_STATE"


class ContentUnparseableError(CapFSError):
    """Raised when none of the parsers registered for a data type accepted the content."""

    default_code = "CONTENT_UNPARSEABLE"
