"""Common pytest fixtures for engine tests."""

from __future__ import annotations

from collections.abc import Generator

from fastapi.testclient import TestClient
import pytest

from fastoapi3 import Engine, new
from fastoapi3.core import get_settings

SETTINGS_ENV_VARS = (
    "OPENAPI_SCHEMA_PATH",
    "OPENAPI_SCHEMA_UI_PATH",
    "OPENAPI_DISABLE_SCHEMA",
    "OPENAPI_TITLE",
    "OPENAPI_VERSION",
    "PORT",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Isolate every test from the caller's environment and cached settings."""

    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def engine() -> Engine:
    """Return an engine with default settings."""

    return new()


@pytest.fixture
def client(engine: Engine) -> TestClient:
    """Return a test client serving through the engine's ASGI entry point."""

    return TestClient(engine)
