"""Pytest fixtures for envloader tests."""

import pytest


@pytest.fixture
def missing_dir(tmp_path):
    """A path inside tmp_path that does not exist yet."""
    return str(tmp_path / "non-existent")


@pytest.fixture
def directory_declarations(missing_dir):
    """One missing and one existing directory variable."""
    return {
        "MY_DIR": {"value": missing_dir, "isDirectory": True},
        "MY_DIR2": {"value": ".", "isDirectory": True},
    }
