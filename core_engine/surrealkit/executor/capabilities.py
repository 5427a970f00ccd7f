"""Server feature probes."""

from __future__ import annotations

import logging

from surrealkit.errors import ExecutionError
from surrealkit.executor.base import DatabaseClient

logger = logging.getLogger(__name__)

REMOVE_API_PROBE = "REMOVE API __surrealkit_capability_probe__;"

# Error fragments meaning the statement itself was not understood.
_UNSUPPORTED_MARKERS = ("unexpected", "parse", "not implemented", "invalid statement")


async def supports_remove_api(client: DatabaseClient) -> bool:
    """Return whether the server understands ``REMOVE API``.

    A "does not exist" style error still proves the syntax is supported;
    only parser-level rejections mean it is not.
    """
    try:
        await client.execute(REMOVE_API_PROBE)
    except ExecutionError as exc:
        message = str(exc).lower()
        supported = not any(marker in message for marker in _UNSUPPORTED_MARKERS)
        logger.debug("REMOVE API probe failed (%s); supported=%s", exc, supported)
        return supported
    return True
