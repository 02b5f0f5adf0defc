"""Test configuration."""

import os
from collections.abc import Generator
from pathlib import Path

import pytest
from pytest import Config

from app.core.logging import configure_logging

fixture = pytest.fixture


@fixture(scope="session")
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


pytest_plugins: list[str] = [
    "tests.fixtures.api",
]


@fixture(autouse=True)
def clean_llm_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep real API credentials out of unit tests."""
    for key in ("OPENROUTER_API_KEY", "CLOUDFLARE_API_TOKEN", "CLOUDFLARE_ACCOUNT_ID"):
        monkeypatch.delenv(key, raising=False)
    yield


def pytest_configure(config: Config) -> None:
    """Configure pytest.

    Args:
        config: Pytest configuration object
    """
    os.environ["TESTING"] = "true"
    # Configure logging for test environment
    configure_logging(testing=True)
    config.addinivalue_line("markers", "integration: mark test as an integration test")
