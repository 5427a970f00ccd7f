"""SurrealKit configuration loaded from environment variables and ``.env``."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

_TRUE_VALUES = frozenset({"1", "true", "yes", "y", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "n", "off"})

DEFAULT_TEST_TIMEOUT_MS = 10_000


def parse_bool(raw: str | None) -> bool | None:
    """Parse a permissive boolean flag, returning ``None`` when unrecognised."""
    if raw is None:
        return None
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    return None


class Settings(BaseSettings):
    """Connection, project layout and runtime settings.

    Database settings use the same variable names as the application that
    owns the schema (``PUBLIC_DATABASE_*``), so a project's ``.env`` file
    works unchanged.  Tool-specific knobs use the ``SURREALKIT_`` prefix.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Database
    database_host: str = Field(
        default="http://localhost:8000",
        validation_alias=AliasChoices("database_host", "PUBLIC_DATABASE_HOST"),
    )
    database_namespace: str = Field(
        default="db",
        validation_alias=AliasChoices("database_namespace", "PUBLIC_DATABASE_NAMESPACE"),
    )
    database_name: str = Field(
        default="test",
        validation_alias=AliasChoices("database_name", "PUBLIC_DATABASE_NAME"),
    )
    database_user: str = Field(
        default="root",
        validation_alias=AliasChoices("database_user", "DATABASE_USER"),
    )
    database_password: SecretStr = Field(
        default=SecretStr("root"),
        validation_alias=AliasChoices("database_password", "DATABASE_PASSWORD"),
    )
    request_timeout: float = Field(
        default=30.0,
        gt=0.0,
        validation_alias=AliasChoices("request_timeout", "SURREALKIT_REQUEST_TIMEOUT"),
    )

    # Sync provenance and pruning guard
    shared_db: str | None = Field(
        default=None,
        validation_alias=AliasChoices("shared_db", "SURREALKIT_SHARED_DB"),
    )
    owner: str | None = Field(
        default=None,
        validation_alias=AliasChoices("owner", "SURREALKIT_OWNER"),
    )

    # Test runner defaults
    test_base_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("test_base_url", "SURREALKIT_TEST_BASE_URL"),
    )
    test_timeout_ms: int | None = Field(
        default=None,
        validation_alias=AliasChoices("test_timeout_ms", "SURREALKIT_TEST_TIMEOUT_MS"),
    )

    # Layout
    project_root: Path = Field(
        default_factory=Path.cwd,
        validation_alias=AliasChoices("project_root", "SURREALKIT_PROJECT_ROOT"),
    )

    # Telemetry
    structured_logging: bool = Field(
        default=False,
        validation_alias=AliasChoices("structured_logging", "SURREALKIT_STRUCTURED_LOGGING"),
    )
    debug: bool = Field(
        default=False,
        validation_alias=AliasChoices("debug", "SURREALKIT_DEBUG"),
    )

    @field_validator("database_password", mode="before")
    @classmethod
    def mask_password_in_repr(cls, v: str | SecretStr) -> SecretStr:
        if isinstance(v, SecretStr):
            return v
        return SecretStr(v)

    @field_validator("test_timeout_ms", mode="before")
    @classmethod
    def ignore_unparseable_timeout(cls, v: object) -> object:
        if isinstance(v, str):
            try:
                return int(v.strip())
            except ValueError:
                logger.warning("Ignoring non-numeric SURREALKIT_TEST_TIMEOUT_MS=%r", v)
                return None
        return v

    # -- Derived layout ------------------------------------------------------

    @property
    def database_dir(self) -> Path:
        return self.project_root / "database"

    @property
    def schema_dir(self) -> Path:
        return self.database_dir / "schema"

    @property
    def migrations_dir(self) -> Path:
        return self.database_dir / "migrations"

    @property
    def state_dir(self) -> Path:
        return self.database_dir / ".surrealkit"

    @property
    def schema_snapshot_path(self) -> Path:
        return self.state_dir / "schema_snapshot.json"

    @property
    def catalog_snapshot_path(self) -> Path:
        return self.state_dir / "catalog_snapshot.json"

    @property
    def setup_path(self) -> Path:
        return self.database_dir / "setup.surql"

    @property
    def seed_path(self) -> Path:
        return self.database_dir / "seed.surql"

    @property
    def tests_dir(self) -> Path:
        return self.database_dir / "tests"

    @property
    def test_config_path(self) -> Path:
        return self.tests_dir / "config.toml"

    @property
    def test_suites_dir(self) -> Path:
        return self.tests_dir / "suites"

    def shared_db_flag(self) -> bool | None:
        """Return the explicit shared-database override, if one parses."""
        return parse_bool(self.shared_db)

    def owner_label(self) -> str | None:
        if self.owner is None or not self.owner.strip():
            return None
        return self.owner


def load_settings(**overrides: object) -> Settings:
    """Load settings from environment, with optional overrides for testing."""
    settings = Settings(**overrides)  # type: ignore[arg-type]

    if settings.debug:
        logger.info(
            "Loaded settings for %s (ns=%s db=%s)",
            settings.database_host,
            settings.database_namespace,
            settings.database_name,
        )

    return settings
