"""Data models for template synchronization."""

from template_sync.models.config import (
    AppConfig,
    DatabaseConfig,
    LoggingConfig,
    StorageConfig,
    SyncConfig,
)
from template_sync.models.record import DownloadReport, GroupRef, Record, UploadReport

__all__ = [
    "Record",
    "GroupRef",
    "DownloadReport",
    "UploadReport",
    "AppConfig",
    "DatabaseConfig",
    "StorageConfig",
    "SyncConfig",
    "LoggingConfig",
]
