"""Pytest configuration for tests."""

from pathlib import Path

import pytest

PROFILES_DIR = Path(__file__).parent / "resources" / "profiles"


@pytest.fixture(scope="session")
def anyio_backend():
    """Configure anyio to use only asyncio backend."""
    return "asyncio"


@pytest.fixture
def profiles_dir() -> Path:
    """Directory holding profile documents used by the tests."""
    return PROFILES_DIR
