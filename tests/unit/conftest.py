"""Shared fixtures for unit tests."""

import os
from collections.abc import Generator
from typing import Any

import pytest
from pytest_mock import MockerFixture, MockType

from autorest.core.config import LogConfig, Settings, get_settings
from autorest.core.context import RequestContext
from autorest.core.error_context import _get_sensitive_fields
from autorest.core.metrics import get_metrics


@pytest.fixture(autouse=True)
def clean_lru_cache() -> Generator[None]:
    """Start and finish every test with fresh settings."""
    get_settings.cache_clear()
    _get_sensitive_fields.cache_clear()
    yield
    get_settings.cache_clear()
    _get_sensitive_fields.cache_clear()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Generator[pytest.MonkeyPatch]:
    """Drop application env vars except the mandatory title.

    Tests that need a variable set it through the yielded monkeypatch.
    """
    original_env = os.environ.copy()

    env_prefixes = [
        "APP_NAME",
        "APP_VERSION",
        "API_",
        "ACTIVE_PROFILE",
        "ENVIRONMENT",
        "DEBUG",
        "LOG_CONFIG__",
        "OBSERVABILITY_CONFIG__",
        "DATABASE_CONFIG__",
        "PAGINATION_CONFIG__",
        "PORT",
    ]
    for key in list(os.environ.keys()):
        if any(key.startswith(prefix) for prefix in env_prefixes):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("APP_TITLE", "Unit test title")

    yield monkeypatch

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def clean_context() -> Generator[None]:
    RequestContext.clear()
    yield
    RequestContext.clear()


@pytest.fixture(autouse=True)
def clean_metrics() -> Generator[None]:
    get_metrics().reset()
    yield
    get_metrics().reset()


@pytest.fixture
def settings() -> Settings:
    """Settings built from the cleaned test environment."""
    return Settings(_env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def mock_get_settings(mocker: MockerFixture) -> MockType:
    """Patch error_context's settings with a custom sensitive field list."""
    mock_settings = mocker.Mock(spec=Settings)
    mock_log_config = mocker.Mock(spec=LogConfig)
    mock_log_config.sensitive_fields = ["custom_secret", "my_password", "ssn"]
    mock_settings.log_config = mock_log_config

    mock_get_settings_fn = mocker.patch("autorest.core.error_context.get_settings")
    mock_get_settings_fn.return_value = mock_settings

    _get_sensitive_fields.cache_clear()
    return mock_get_settings_fn


@pytest.fixture
def sample_sensitive_data() -> dict[str, Any]:
    """Nested data with sensitive fields at various depths."""
    return {
        "username": "john_doe",
        "password": "secret123",
        "user_data": {
            "email": "john@example.com",
            "api_key": "sk-1234567890",
            "profile": {"name": "John Doe", "secret_token": "bearer-xyz"},
        },
        "items": [
            {"id": 1, "name": "Item 1", "token": "item_token_1"},
        ],
        "tuple_data": ("public", {"secret": "hidden"}),
    }
