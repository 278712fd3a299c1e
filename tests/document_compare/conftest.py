"""
Shared fixtures for document comparison tests.
"""

import pytest

from config_logging import AppConfig, reset_config
from document_compare.text_diff import reset_default_differ


@pytest.fixture(autouse=True)
def fresh_config():
    """Every test starts from environment defaults."""
    reset_config()
    reset_default_differ()
    yield
    reset_config()
    reset_default_differ()


@pytest.fixture
def config() -> AppConfig:
    return AppConfig()


@pytest.fixture
def slow_path_config() -> AppConfig:
    """Config with the identical-document shortcut disabled."""
    return AppConfig(fast_path=False)
