"""Bootstrap DDL for SurrealKit's tracking tables, and the seed script."""

from __future__ import annotations

import logging

from surrealkit.config import Settings
from surrealkit.errors import ConfigurationError, StateIOError
from surrealkit.executor.base import DatabaseClient

logger = logging.getLogger(__name__)

BOOTSTRAP_SQL = """
DEFINE TABLE OVERWRITE _migration SCHEMAFULL
    PERMISSIONS NONE;
DEFINE FIELD OVERWRITE file ON _migration
    TYPE string;
DEFINE FIELD OVERWRITE applied_at ON _migration
    TYPE datetime
    DEFAULT time::now();
DEFINE INDEX OVERWRITE by_file ON _migration
    FIELDS file;

DEFINE TABLE OVERWRITE _surrealkit_sync SCHEMAFULL
    PERMISSIONS NONE;
DEFINE FIELD OVERWRITE path ON _surrealkit_sync
    TYPE string;
DEFINE FIELD OVERWRITE hash ON _surrealkit_sync
    TYPE string;
DEFINE FIELD OVERWRITE synced_at ON _surrealkit_sync
    TYPE datetime
    DEFAULT time::now();
DEFINE INDEX OVERWRITE by_path ON _surrealkit_sync
    FIELDS path
    UNIQUE;

DEFINE TABLE OVERWRITE _surrealkit_sync_meta SCHEMAFULL
    PERMISSIONS NONE;
DEFINE FIELD OVERWRITE key ON _surrealkit_sync_meta
    TYPE string;
DEFINE FIELD OVERWRITE value ON _surrealkit_sync_meta
    TYPE any;
DEFINE FIELD OVERWRITE updated_at ON _surrealkit_sync_meta
    TYPE datetime
    DEFAULT time::now();
DEFINE INDEX OVERWRITE by_key ON _surrealkit_sync_meta
    FIELDS key
    UNIQUE;
"""


async def ensure_bootstrap_schema(client: DatabaseClient, settings: Settings) -> None:
    """Run the project's ``setup.surql`` (if any), then the tracking-table DDL.

    Every statement is ``OVERWRITE``-style, so this is safe to repeat.
    """
    setup_path = settings.setup_path
    if setup_path.is_file():
        try:
            setup_sql = setup_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StateIOError("reading", setup_path) from exc
        if setup_sql.strip():
            logger.debug("Executing %s", setup_path)
            await client.execute(setup_sql)
    await client.execute(BOOTSTRAP_SQL)


async def apply_seed(client: DatabaseClient, settings: Settings) -> None:
    """Execute ``seed.surql``.

    Raises
    ------
    ConfigurationError
        The seed file does not exist.
    """
    seed_path = settings.seed_path
    if not seed_path.is_file():
        raise ConfigurationError(f"seed file not found: {seed_path}")
    try:
        seed_sql = seed_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise StateIOError("reading", seed_path) from exc
    await client.execute(seed_sql)
    logger.info("Applied seed %s", seed_path)
