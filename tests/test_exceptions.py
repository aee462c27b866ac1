"""
Tests for the capfs.exceptions module.

This module tests:
- CapFSError base class attributes and formatting
- Error codes of the specialized classes
- Cause chains and terminal reports
"""

import io

import pytest
from rich.console import Console

from capfs.exceptions import (
    CapFSError,
    ContentUnparseableError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
)


# =============================================================================
# CapFSError Tests
# =============================================================================

class TestCapFSError:
    """Tests for the base CapFSError class."""

    def test_basic_creation(self):
        error = CapFSError("Something went wrong")

        assert str(error) == "[CAPFS_ERROR] Something went wrong"
        assert error.message == "Something went wrong"
        assert error.cause is None

    def test_with_all_attributes(self):
        error = CapFSError(
            "Test error",
            error_code="ERR001",
            path="/tmp/x",
            context={"key": "value"},
            suggestion="Try this fix",
        )

        assert error.error_code == "ERR001"
        assert error.path == "/tmp/x"
        assert error.context == {"key": "value"}
        assert error.suggestion == "Try this fix"
        assert error.timestamp > 0

    def test_cause_is_attached(self):
        native = FileNotFoundError(2, "No such file or directory")

        error = NotFoundError("Missing", cause=native)

        assert error.cause is native
        assert error.__cause__ is native

    def test_trace_follows_cause_chain(self):
        inner = ValueError("bad token")
        middle = ContentUnparseableError("Cannot parse", cause=inner)
        outer = InvalidStateError("Load failed", cause=middle)

        assert outer.trace == ["Load failed", "Cannot parse", "ValueError: bad token"]

    def test_to_dict(self):
        error = InvalidArgumentError("Bad", path="/a", cause=TypeError("nope"))

        data = error.to_dict()

        assert data["error_type"] == "InvalidArgumentError"
        assert data["error_code"] == "INVALID_ARGUMENT"
        assert data["path"] == "/a"
        assert "TypeError" in data["cause"]


# =============================================================================
# Specialized Errors
# =============================================================================

class TestErrorCodes:
    """Tests for the specialized error classes."""

    @pytest.mark.parametrize(
        "error_class, code",
        [
            (NotFoundError, "NOT_FOUND"),
            (InvalidArgumentError, "INVALID_ARGUMENT"),
            (InvalidStateError, "INVALID_STATE"),
            (ContentUnparseableError, "CONTENT_UNPARSEABLE"),
        ],
    )
    def test_default_codes(self, error_class, code):
        error = error_class("message")

        assert isinstance(error, CapFSError)
        assert error.error_code == code
        assert str(error) == f"[{code}] message"


# =============================================================================
# Reporting
# =============================================================================

class TestReport:
    """Tests for rendering errors to a console."""

    def _render(self, error, verbose=False):
        buffer = io.StringIO()
        error.report(verbose=verbose, console=Console(file=buffer, width=200))
        return buffer.getvalue()

    def test_report_lists_trace(self):
        error = NotFoundError(
            "No such file '/tmp/a'",
            cause=FileNotFoundError("gone"),
            suggestion="Check the path",
        )

        output = self._render(error)

        assert "NOT_FOUND" in output
        assert "No such file '/tmp/a'" in output
        assert "FileNotFoundError: gone" in output
        assert "Check the path" in output
        assert "Traceback" not in output

    def test_verbose_report_includes_cause_traceback(self):
        try:
            raise KeyError("inner")
        except KeyError as e:
            error = InvalidStateError("Outer", cause=e)

        output = self._render(error, verbose=True)

        assert "Caused by" in output
        assert "Traceback" in output
