"""Configuration models for template synchronization."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseModel):
    """Configuration for the forum database."""

    url: str = Field(default=..., description="SQLAlchemy database URL")
    echo: bool = Field(default=False, description="Echo SQL statements through logging")
    table_prefix: str = Field(default="mybb_", description="Prefix of the forum tables")
    properties_format: Literal["php", "json"] = Field(
        default="php", description="Encoding of the themes.properties column"
    )


class StorageConfig(BaseModel):
    """Configuration for local files and the modification ledger."""

    data_root: str = Field(default=".temp", description="Application data directory")
    templates_dir: str = Field(
        default="templates", description="Template folder, relative to data_root"
    )
    ledger_file: str = Field(
        default="history.json", description="Ledger file name, relative to data_root"
    )
    extension: str = Field(default=".tpl", description="Extension of template files")
    encoding: str = Field(default="utf-8", description="Text encoding of template files")

    @field_validator("extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        """Require a dotted extension such as '.tpl'."""
        if not v.startswith(".") or len(v) < 2 or "/" in v or "\\" in v:
            raise ValueError("extension must start with '.' and contain no path separators")
        return v

    @property
    def templates_path(self) -> Path:
        return Path(self.data_root) / self.templates_dir

    @property
    def ledger_path(self) -> Path:
        return Path(self.data_root) / self.ledger_file


class SyncConfig(BaseModel):
    """Configuration for the synchronization policy."""

    core_group_id: int = Field(default=-2, description="Templateset id of the core templates")
    properties_key: str = Field(
        default="templateset", description="Theme property holding the templateset id"
    )
    version_code: str = Field(
        default="1839", description="Version code written on inserted templates"
    )


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    log_level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    json_logs: bool = Field(
        default=False,
        description="If True, output JSON logs. If False, use console format.",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional path to log file. If None, logs only to stderr.",
    )


class AppConfig(BaseSettings):
    """Main application configuration.

    Values can be supplied through environment variables with the
    TEMPLATE_SYNC_ prefix, e.g. TEMPLATE_SYNC_DATABASE__URL.
    """

    model_config = SettingsConfigDict(
        env_prefix="TEMPLATE_SYNC_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    database: DatabaseConfig
    storage: StorageConfig = Field(default_factory=StorageConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
