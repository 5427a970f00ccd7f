"""Shared fixtures for CLI tests.

Every command opens its database session through
``surrealkit_cli.app.connect``; tests patch that name with an
:class:`~unittest.mock.AsyncMock` so no server is needed.
"""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

_ENV_VARS = (
    "PUBLIC_DATABASE_HOST",
    "PUBLIC_DATABASE_NAMESPACE",
    "PUBLIC_DATABASE_NAME",
    "DATABASE_USER",
    "DATABASE_PASSWORD",
    "SURREALKIT_SHARED_DB",
    "SURREALKIT_OWNER",
    "SURREALKIT_TEST_BASE_URL",
    "SURREALKIT_TEST_TIMEOUT_MS",
    "SURREALKIT_REQUEST_TIMEOUT",
    "SURREALKIT_STRUCTURED_LOGGING",
    "SURREALKIT_DEBUG",
)


@pytest.fixture(autouse=True)
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point the CLI at an empty project and restore logging afterwards."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SURREALKIT_PROJECT_ROOT", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    (tmp_path / "database").mkdir()

    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield tmp_path
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture()
def db_client() -> AsyncMock:
    return AsyncMock()


@pytest.fixture()
def mock_connect(db_client: AsyncMock):
    with patch("surrealkit_cli.app.connect", new=AsyncMock(return_value=db_client)) as connect:
        yield connect
