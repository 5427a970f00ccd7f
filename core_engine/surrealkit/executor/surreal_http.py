"""SurrealDB session over the HTTP REST endpoints.

Each :class:`SurrealHttpClient` is one logical session: it owns its own
namespace/database selection and bearer token, so actor sessions built for
a test suite never share authentication state.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from surrealkit.errors import AuthenticationError, QueryError, TransportError
from surrealkit.executor.base import (
    Credentials,
    DatabaseCredentials,
    NamespaceCredentials,
    RecordCredentials,
    RootCredentials,
)
from surrealkit.executor.retry import RetryConfig, async_retry_with_backoff

logger = logging.getLogger(__name__)

_CONNECT_RETRY = RetryConfig(max_retries=3, base_delay=0.5, max_delay=5.0)


def http_base_url(address: str) -> str:
    """Rewrite a ``ws://``/``wss://`` address to its HTTP equivalent.

    A trailing ``/rpc`` path (the websocket endpoint) is dropped as well.
    """
    url = address.strip().rstrip("/")
    if url.startswith("ws://"):
        url = "http://" + url[len("ws://") :]
    elif url.startswith("wss://"):
        url = "https://" + url[len("wss://") :]
    if url.endswith("/rpc"):
        url = url[: -len("/rpc")]
    return url


def _signin_payload(credentials: Credentials) -> dict[str, Any]:
    if isinstance(credentials, RootCredentials):
        return {"user": credentials.username, "pass": credentials.password}
    if isinstance(credentials, NamespaceCredentials):
        return {"ns": credentials.namespace, "user": credentials.username, "pass": credentials.password}
    if isinstance(credentials, DatabaseCredentials):
        return {
            "ns": credentials.namespace,
            "db": credentials.database,
            "user": credentials.username,
            "pass": credentials.password,
        }
    if isinstance(credentials, RecordCredentials):
        payload: dict[str, Any] = dict(credentials.params)
        payload.update({"ns": credentials.namespace, "db": credentials.database, "ac": credentials.access})
        return payload
    raise TypeError(f"unsupported credentials type: {type(credentials).__name__}")


def _binding_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text.strip() or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        for key in ("information", "details", "description", "result"):
            if body.get(key):
                return str(body[key])
    return response.text.strip() or f"HTTP {response.status_code}"


class SurrealHttpClient:
    """Async SurrealDB session backed by :class:`httpx.AsyncClient`.

    Parameters
    ----------
    base_url:
        Server root URL.  ``ws(s)://`` addresses are accepted and rewritten.
    timeout:
        Per-request timeout in seconds.
    transport:
        Optional httpx transport, used by tests to stub the server.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = http_base_url(base_url)
        self._namespace: str | None = None
        self._database: str | None = None
        self._token: str | None = None
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(timeout),
            headers={"Accept": "application/json"},
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def namespace(self) -> str | None:
        return self._namespace

    @property
    def database(self) -> str | None:
        return self._database

    @property
    def token(self) -> str | None:
        return self._token

    # -- Session -------------------------------------------------------------

    async def health(self) -> None:
        """Probe ``GET /health``.

        Raises
        ------
        TransportError
            The server is unreachable or unhealthy.
        """
        try:
            response = await self._client.get("/health")
        except httpx.RequestError as exc:
            raise TransportError(f"cannot reach {self._base_url}: {exc}") from exc
        if response.status_code >= 400:
            raise TransportError(f"{self._base_url}/health returned {response.status_code}")

    async def signin(self, credentials: Credentials) -> str | None:
        try:
            response = await self._client.post("/signin", json=_signin_payload(credentials))
        except httpx.RequestError as exc:
            raise TransportError(f"signin request to {self._base_url} failed: {exc}") from exc

        if response.status_code >= 400:
            raise AuthenticationError(f"signin rejected ({response.status_code}): {_error_detail(response)}")

        try:
            body = response.json()
        except ValueError as exc:
            raise AuthenticationError("signin response was not JSON") from exc

        token = body.get("token") if isinstance(body, dict) else None
        if token:
            self._token = str(token)
        return self._token

    async def authenticate(self, token: str) -> None:
        self._token = token

    async def use(self, namespace: str, database: str | None = None) -> None:
        self._namespace = namespace
        self._database = database

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()

    # -- Queries -------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "text/plain"}
        if self._namespace:
            headers["Surreal-NS"] = self._namespace
        if self._database:
            headers["Surreal-DB"] = self._database
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def execute(self, query: str, bindings: dict[str, Any] | None = None) -> list[Any]:
        params = {key: _binding_text(value) for key, value in (bindings or {}).items()}
        try:
            response = await self._client.post(
                "/sql",
                content=query.encode("utf-8"),
                headers=self._headers(),
                params=params,
            )
        except httpx.RequestError as exc:
            raise TransportError(f"query to {self._base_url} failed: {exc}") from exc

        if response.status_code in (401, 403):
            raise AuthenticationError(_error_detail(response))
        if response.status_code >= 400:
            raise QueryError(_error_detail(response))

        try:
            statements = response.json()
        except ValueError as exc:
            raise QueryError(f"unexpected non-JSON response from /sql: {response.text[:200]}") from exc
        if not isinstance(statements, list):
            raise QueryError(f"unexpected /sql response shape: {type(statements).__name__}")

        results: list[Any] = []
        errors: list[str] = []
        for statement in statements:
            if not isinstance(statement, dict):
                results.append(statement)
                continue
            if str(statement.get("status", "OK")).upper() == "ERR":
                errors.append(str(statement.get("result") or statement.get("detail") or "query failed"))
            results.append(statement.get("result"))

        if errors:
            raise QueryError("; ".join(errors))
        return results


async def connect(
    address: str,
    *,
    timeout: float = 30.0,
    retry: RetryConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> SurrealHttpClient:
    """Open a session against *address* once its health endpoint responds.

    Transport failures are retried with exponential backoff; the client is
    closed again if the server never becomes reachable.
    """
    client = SurrealHttpClient(address, timeout=timeout, transport=transport)
    try:
        await async_retry_with_backoff(
            client.health,
            retry or _CONNECT_RETRY,
            retryable_exceptions=(TransportError,),
            description=f"connect to {client.base_url}",
        )
    except TransportError:
        await client.close()
        raise
    logger.debug("Connected to %s", client.base_url)
    return client
