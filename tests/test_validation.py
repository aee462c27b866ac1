"""
Tests for the capfs.validation module.
"""

from typing import Optional, Union

import pytest
from pydantic import ValidationError

from capfs.exceptions import InvalidArgumentError
from capfs.filesystem import DirectoryEntry
from capfs.validation import assert_condition, assert_type


class TestAssertType:
    """Tests for assert_type."""

    def test_accepts_matching_values(self):
        assert_type("a", str)
        assert_type(None, Optional[str])
        assert_type(DirectoryEntry("/a"), Union[str, DirectoryEntry])
        assert_type(["x"], list)

    def test_rejects_wrong_type(self):
        with pytest.raises(InvalidArgumentError) as exc_info:
            assert_type(5, str, name="path")

        assert "path" in exc_info.value.message
        assert isinstance(exc_info.value.cause, ValidationError)

    def test_strict_mode_does_not_coerce(self):
        with pytest.raises(InvalidArgumentError):
            assert_type("5", int)

    def test_rejects_arbitrary_class_mismatch(self):
        with pytest.raises(InvalidArgumentError):
            assert_type("/a", DirectoryEntry)

    def test_empty_values(self):
        with pytest.raises(InvalidArgumentError):
            assert_type("", str)
        with pytest.raises(InvalidArgumentError):
            assert_type([], list)

        assert_type("", str, allow_empty=True)


class TestAssertCondition:
    """Tests for assert_condition."""

    def test_passes(self):
        assert_condition(True, "unused")

    def test_fails_with_context(self):
        with pytest.raises(InvalidArgumentError) as exc_info:
            assert_condition(False, "must hold", value=3)

        assert exc_info.value.message == "must hold"
        assert exc_info.value.context == {"value": 3}
