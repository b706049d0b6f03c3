"""Shared test fixtures for the Aureus test suite."""

from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from aureus.config import get_settings
from aureus.config.settings import set_toml_config
from aureus.conversation.models import UserIdentity
from aureus.conversation.stores import InMemoryMessageStore
from aureus.providers.llm import MockGenerationSource


@pytest.fixture
def test_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory for testing."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def mock_toml_files(test_config_dir: Path) -> Callable[[dict[str, str]], None]:
    """Factory fixture to create TOML files in the test config directory.

    Usage:
        def test_something(mock_toml_files):
            mock_toml_files({
                "default.toml": "app_name = 'test'",
                "development.toml": "debug = true",
            })
    """

    def _create_toml_files(files: dict[str, str]) -> None:
        for filename, content in files.items():
            (test_config_dir / filename).write_text(content)

    return _create_toml_files


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Clear cached settings and TOML values around each test."""
    get_settings.cache_clear()
    set_toml_config({})
    yield
    get_settings.cache_clear()
    set_toml_config({})


@pytest.fixture
def identity() -> UserIdentity:
    return UserIdentity(user_id="user-1", username="ana")


@pytest.fixture
def store() -> InMemoryMessageStore:
    """Create a fresh store for each test."""
    return InMemoryMessageStore()


@pytest.fixture
def source() -> MockGenerationSource:
    return MockGenerationSource(default_response="Hello there")
