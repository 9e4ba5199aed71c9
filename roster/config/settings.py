"""
Main settings object.
"""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import URL

from roster.core.policy import DeletionPolicy, DeletionPolicyName, get_deletion_policy

from .managers import AsyncSessionManager, SyncSessionManager


class Settings(BaseSettings):
    database_type: Literal["sqlite", "postgres"] = "sqlite"
    database_user: str | None = None
    database_password: str | None = None
    database_port: int | None = None
    database_host: str | None = None
    database_db: str = "roster.db"

    database_echo: bool = False

    # Who may delete groups. There is no single rule for this across
    # deployments, so it is configured rather than fixed.
    group_deletion_policy: DeletionPolicyName = "teacher_only"

    # Most groups a single teacher may advise. None for no limit.
    adviser_group_limit: int | None = 5

    # Header carrying the institutional ID of the signed-in user, set by the
    # authenticating proxy in front of this service.
    session_header: str = "X-Institutional-Id"

    hostname: str = "http://localhost:8000"

    model_config = SettingsConfigDict(env_prefix="ROSTER_", env_file=".env")

    @property
    def sync_driver(self) -> str:
        match self.database_type:
            case "sqlite":
                return "sqlite"
            case "postgres":
                return "postgresql+psycopg"
            case _:
                raise ValueError

    @property
    def async_driver(self) -> str:
        match self.database_type:
            case "sqlite":
                return "sqlite+aiosqlite"
            case "postgres":
                return "postgresql+asyncpg"
            case _:
                raise ValueError

    @property
    def sync_uri(self) -> URL:
        return URL.create(
            drivername=self.sync_driver,
            username=self.database_user,
            password=self.database_password,
            host=self.database_host,
            port=self.database_port,
            database=self.database_db,
        )

    def sync_manager(self) -> SyncSessionManager:
        return SyncSessionManager(connection_url=self.sync_uri, echo=self.database_echo)

    @property
    def async_uri(self) -> URL:
        return URL.create(
            drivername=self.async_driver,
            username=self.database_user,
            password=self.database_password,
            host=self.database_host,
            port=self.database_port,
            database=self.database_db,
        )

    def async_manager(self) -> AsyncSessionManager:
        return AsyncSessionManager(
            connection_url=self.async_uri, echo=self.database_echo
        )

    @property
    def deletion_policy(self) -> DeletionPolicy:
        return get_deletion_policy(self.group_deletion_policy)
