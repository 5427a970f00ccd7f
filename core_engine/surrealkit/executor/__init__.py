"""Database session interface and the SurrealDB HTTP transport."""

from surrealkit.executor.base import (
    Credentials,
    DatabaseClient,
    DatabaseCredentials,
    NamespaceCredentials,
    RecordCredentials,
    RootCredentials,
    query_value,
)
from surrealkit.executor.capabilities import supports_remove_api
from surrealkit.executor.retry import RetryConfig, async_retry_with_backoff
from surrealkit.executor.surreal_http import SurrealHttpClient, connect, http_base_url

__all__ = [
    "Credentials",
    "DatabaseClient",
    "DatabaseCredentials",
    "NamespaceCredentials",
    "RecordCredentials",
    "RetryConfig",
    "RootCredentials",
    "SurrealHttpClient",
    "async_retry_with_backoff",
    "connect",
    "http_base_url",
    "query_value",
    "supports_remove_api",
]
