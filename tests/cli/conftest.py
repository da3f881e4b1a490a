"""Shared fixtures for CLI tests."""

from pathlib import Path
from unittest.mock import patch

import pytest


@pytest.fixture
def tmp_config_path(tmp_path: Path) -> Path:
    """Provide a temporary config file path."""
    return tmp_path / "finrecall.yaml"


@pytest.fixture
def patched_store(persistent_store):
    """Route CLI commands to the fake-backed persistent store."""
    with patch(
        "finrecall.cli.memory_cmd.create_persistent_store",
        return_value=persistent_store,
    ) as factory:
        factory.store = persistent_store
        yield factory
