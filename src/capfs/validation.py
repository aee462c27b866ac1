"""
Runtime argument validation.

Public operations call assert_type() at their boundary so that malformed
arguments are rejected before any I/O is attempted.
"""

from __future__ import annotations

from collections.abc import Sized
from functools import lru_cache
from typing import Any

from pydantic import ConfigDict, TypeAdapter, ValidationError

from .exceptions import InvalidArgumentError


@lru_cache(maxsize=128)
def _adapter(expected: Any) -> TypeAdapter:
    return TypeAdapter(
        expected,
        config=ConfigDict(arbitrary_types_allowed=True, strict=True),
    )


def _describe(expected: Any) -> str:
    return getattr(expected, "__name__", None) or str(expected).replace("typing.", "")


def assert_type(
    value: Any,
    expected: Any,
    *,
    allow_empty: bool = False,
    name: str = "value",
) -> None:
    """
    Assert that a value matches a type descriptor.

    Args:
        value: The value to check
        expected: A Python type or typing annotation (e.g. ``str``,
            ``Optional[str]``, ``Union[str, DirectoryEntry]``)
        allow_empty: Accept empty strings and empty collections
        name: Argument name used in the error message

    Raises:
        InvalidArgumentError: If the value does not match, or is empty
            while ``allow_empty`` is False
    """
    try:
        _adapter(expected).validate_python(value, strict=True)
    except ValidationError as e:
        raise InvalidArgumentError(
            f"Invalid type for '{name}'. Expected {_describe(expected)}, "
            f"got {type(value).__name__}",
            context={"argument": name},
            cause=e,
        ) from e

    if not allow_empty and isinstance(value, Sized) and len(value) == 0:
        raise InvalidArgumentError(
            f"Invalid value for '{name}'. Expected {_describe(expected)} "
            "[no empty values]",
            context={"argument": name},
        )


def assert_condition(condition: bool, message: str, **context: Any) -> None:
    """Raise InvalidArgumentError with ``message`` unless ``condition`` holds."""
    if not condition:
        raise InvalidArgumentError(message, context=context or None)
