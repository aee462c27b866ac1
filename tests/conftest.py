"""Shared fixtures for the capfs test suite."""

import pytest

from capfs.config import ENV_PREFIX, FileSystemConfig, set_config


@pytest.fixture(autouse=True)
def reset_config(monkeypatch):
    """Start every test from the default configuration."""
    for field_name in FileSystemConfig.__dataclass_fields__:
        monkeypatch.delenv(f"{ENV_PREFIX}{field_name.upper()}", raising=False)
    set_config(None)
    yield
    set_config(None)
