"""Structural interface for database sessions.

Everything above the transport (ledger, sync, test runner) talks to the
database through :class:`DatabaseClient`, so a different transport can be
dropped in without touching call sites.  Test code relies on this to run
against an in-memory fake.
"""

from __future__ import annotations

from typing import Any, Protocol, Union

from pydantic import BaseModel, Field


class RootCredentials(BaseModel):
    username: str
    password: str


class NamespaceCredentials(BaseModel):
    namespace: str
    username: str
    password: str


class DatabaseCredentials(BaseModel):
    namespace: str
    database: str
    username: str
    password: str


class RecordCredentials(BaseModel):
    """Record-access signin: a named ``DEFINE ACCESS`` plus its parameters."""

    namespace: str
    database: str
    access: str
    params: dict[str, Any] = Field(default_factory=dict)


Credentials = Union[RootCredentials, NamespaceCredentials, DatabaseCredentials, RecordCredentials]


class DatabaseClient(Protocol):
    """One authenticated database session.

    Implementations are **not** required to subclass this protocol; they only
    need to expose methods with matching signatures (duck typing).
    """

    async def signin(self, credentials: Credentials) -> str | None:
        """Sign in and return the issued bearer token, if any.

        Raises
        ------
        AuthenticationError
            The server rejected the credentials.
        """
        ...

    async def authenticate(self, token: str) -> None:
        """Attach an existing bearer token to the session."""
        ...

    async def use(self, namespace: str, database: str | None = None) -> None:
        """Select the namespace (and optionally database) for later queries."""
        ...

    async def execute(self, query: str, bindings: dict[str, Any] | None = None) -> list[Any]:
        """Execute *query* and return one result per statement.

        Raises
        ------
        QueryError
            Any statement in the batch failed.
        TransportError
            The server could not be reached.
        """
        ...

    async def close(self) -> None:
        """Release the underlying connection."""
        ...


async def query_value(
    client: DatabaseClient,
    query: str,
    bindings: dict[str, Any] | None = None,
) -> Any:
    """Execute *query* and return the first statement's result, or ``None``."""
    results = await client.execute(query, bindings)
    if not results:
        return None
    return results[0]
