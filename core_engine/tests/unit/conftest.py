"""Shared fixtures for the SurrealKit engine unit tests.

``FakeDatabaseClient`` is an in-memory stand-in for a SurrealDB session.  It
understands the tracking-table statements issued by the repositories
(``_migration``, ``_surrealkit_sync``, ``_surrealkit_sync_meta``) and records
every other statement so tests can assert on what was executed.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from surrealkit.config import Settings
from surrealkit.errors import AuthenticationError, QueryError

_META_VALUE_RE = re.compile(r"value: (.+?), updated_at", re.DOTALL)

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
    "SURREALKIT_PROJECT_ROOT",
    "SURREALKIT_STRUCTURED_LOGGING",
    "SURREALKIT_DEBUG",
)


class FakeDatabaseClient:
    """In-memory DatabaseClient.

    Parameters
    ----------
    fail_on:
        ``substring -> error message``; a query containing the substring
        raises :class:`QueryError` with that message.
    results:
        ``substring -> value``; a query containing the substring returns
        ``[value]``.
    reject_signin:
        Make every ``signin`` raise :class:`AuthenticationError`.
    """

    def __init__(
        self,
        *,
        fail_on: dict[str, str] | None = None,
        results: dict[str, Any] | None = None,
        reject_signin: bool = False,
        name: str = "client",
    ) -> None:
        self.name = name
        self.fail_on = dict(fail_on or {})
        self.results = dict(results or {})
        self.reject_signin = reject_signin
        self.executed: list[str] = []
        self.bindings: list[dict[str, Any] | None] = []
        self.credentials: list[Any] = []
        self.token: str | None = None
        self.namespace: str | None = None
        self.database: str | None = None
        self.closed = False
        self.migrations: dict[str, dict[str, Any]] = {}
        self.sync_hashes: dict[str, str] = {}
        self.meta: dict[str, Any] = {}
        self._clock = 0

    # -- DatabaseClient ------------------------------------------------------

    async def signin(self, credentials: Any) -> str | None:
        if self.reject_signin:
            raise AuthenticationError("signin rejected (401): invalid credentials")
        self.credentials.append(credentials)
        self.token = f"token-{len(self.credentials)}"
        return self.token

    async def authenticate(self, token: str) -> None:
        self.token = token

    async def use(self, namespace: str, database: str | None = None) -> None:
        self.namespace = namespace
        self.database = database

    async def close(self) -> None:
        self.closed = True

    async def execute(self, query: str, bindings: dict[str, Any] | None = None) -> list[Any]:
        self.executed.append(query)
        self.bindings.append(bindings)
        for needle, message in self.fail_on.items():
            if needle in query:
                raise QueryError(message)
        for needle, value in self.results.items():
            if needle in query:
                return [value]
        return self._tracking(query, bindings or {})

    # -- Tracking tables -----------------------------------------------------

    def _tick(self) -> str:
        self._clock += 1
        return f"2025-01-01T00:00:{self._clock:02d}Z"

    def _tracking(self, query: str, bindings: dict[str, Any]) -> list[Any]:
        if query.lstrip().startswith("DEFINE"):
            return [[]]
        if "type::thing('_migration', $id)" in query and query.startswith("SELECT"):
            row = self.migrations.get(bindings["id"])
            return [[row] if row else []]
        if query.startswith("CREATE type::thing('_migration'"):
            self.migrations[bindings["id"]] = {
                "id": f"_migration:⟨{bindings['id']}⟩",
                "file": bindings["file"],
                "applied_at": self._tick(),
            }
            return [[self.migrations[bindings["id"]]]]
        if "FROM _migration ORDER BY" in query:
            rows = sorted(self.migrations.values(), key=lambda r: r["applied_at"])
            return [rows]
        if "_surrealkit_sync_meta" in query:
            return self._meta(query, bindings)
        if query.startswith("SELECT path, hash FROM _surrealkit_sync;"):
            return [[{"path": p, "hash": h} for p, h in sorted(self.sync_hashes.items())]]
        if "FROM _surrealkit_sync WHERE path" in query:
            path = bindings["path"]
            if path not in self.sync_hashes:
                return [[]]
            return [[{"path": path, "hash": self.sync_hashes[path]}]]
        if query.startswith("DELETE _surrealkit_sync WHERE path"):
            self.sync_hashes[bindings["path"]] = bindings["hash"]
            return [[], [{"path": bindings["path"], "hash": bindings["hash"]}]]
        return [[]]

    def _meta(self, query: str, bindings: dict[str, Any]) -> list[Any]:
        key = bindings["key"]
        if query.startswith("SELECT"):
            if key not in self.meta:
                return [[]]
            return [[{"key": key, "value": self.meta[key]}]]
        match = _META_VALUE_RE.search(query)
        assert match is not None, query
        self.meta[key] = json.loads(match.group(1))
        return [[], [{"key": key, "value": self.meta[key]}]]

    # -- Helpers -------------------------------------------------------------

    def statements_containing(self, needle: str) -> list[str]:
        return [q for q in self.executed if needle in q]


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def fake_client() -> FakeDatabaseClient:
    return FakeDatabaseClient()


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    """A project root with an empty ``database/`` layout."""
    for sub in ("schema", "migrations", "tests/suites"):
        (tmp_path / "database" / sub).mkdir(parents=True)
    return tmp_path


@pytest.fixture()
def make_settings(project: Path) -> Callable[..., Settings]:
    def _make(**overrides: Any) -> Settings:
        overrides.setdefault("project_root", project)
        return Settings(_env_file=None, **overrides)

    return _make


@pytest.fixture()
def settings(make_settings: Callable[..., Settings]) -> Settings:
    return make_settings()


def _write_file(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture()
def write_file() -> Callable[[Path, str], Path]:
    return _write_file


@pytest.fixture()
def make_client() -> type[FakeDatabaseClient]:
    return FakeDatabaseClient
