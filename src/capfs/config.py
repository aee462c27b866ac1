"""
Configuration for capfs.

This module defines the process-wide settings that entries fall back to when
a caller does not pass an explicit value (encodings, data types, glob
behaviour, temporary directory naming and logging).
"""

from __future__ import annotations

import codecs
import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

from .exceptions import InvalidArgumentError

ENV_PREFIX = "CAPFS_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class FileSystemConfig:
    """
    Configuration for filesystem entries.

    Instances are immutable; use ``dataclasses.replace`` or ``configure()`` to
    derive a modified copy.
    """

    default_encoding: str = "utf-8"
    """Text encoding used by read/write/load_data when none is given."""

    default_data_type: str = "any"
    """Type token used by load_data when none is given (json, json5, yaml, any)."""

    include_hidden: bool = False
    """Whether glob patterns match dot-files and dot-directories."""

    temp_prefix: str = "capfs"
    """Prefix for temporary cap directories created without a name."""

    log_level: str = "WARNING"
    """Level applied by init_logging() when no explicit level is passed."""

    def __post_init__(self):
        """Validate configuration after initialization."""
        try:
            codecs.lookup(self.default_encoding)
        except LookupError as e:
            raise InvalidArgumentError(
                f"Unknown default_encoding '{self.default_encoding}'",
                cause=e,
            ) from e

        from .filesystem.loaders import DATA_LOADERS

        if self.default_data_type.lower() not in DATA_LOADERS:
            raise InvalidArgumentError(
                f"Unsupported default_data_type '{self.default_data_type}'. "
                f"Supported types: {', '.join(DATA_LOADERS)}."
            )

        if not self.temp_prefix or os.sep in self.temp_prefix or "/" in self.temp_prefix:
            raise InvalidArgumentError(
                f"temp_prefix must be a plain name, got '{self.temp_prefix}'"
            )

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise InvalidArgumentError(f"Unknown log_level '{self.log_level}'")

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "FileSystemConfig":
        """
        Build a configuration from ``CAPFS_*`` environment variables.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Returns:
            A FileSystemConfig with defaults for every unset variable
        """
        environ = os.environ if environ is None else environ
        values: Dict[str, Any] = {}

        for f in fields(cls):
            raw = environ.get(f"{ENV_PREFIX}{f.name.upper()}")
            if raw is None:
                continue
            if f.type in (bool, "bool"):
                lowered = raw.strip().lower()
                if lowered in _TRUE_VALUES:
                    values[f.name] = True
                elif lowered in _FALSE_VALUES:
                    values[f.name] = False
                else:
                    raise InvalidArgumentError(
                        f"{ENV_PREFIX}{f.name.upper()} must be a boolean, got '{raw}'"
                    )
            else:
                values[f.name] = raw.strip()

        return cls(**values)


_config: Optional[FileSystemConfig] = None


def get_config() -> FileSystemConfig:
    """Return the process-wide configuration, building it from the environment on first use."""
    global _config
    if _config is None:
        _config = FileSystemConfig.from_env()
    return _config


def set_config(config: Optional[FileSystemConfig]) -> None:
    """Replace the process-wide configuration (``None`` re-reads the environment lazily)."""
    global _config
    _config = config


def configure(**overrides: Any) -> FileSystemConfig:
    """Apply overrides to the current configuration and make the result current."""
    config = replace(get_config(), **overrides)
    set_config(config)
    return config
