"""Record store interface and implementations."""

from template_sync.store.record_store import RecordStore
from template_sync.store.sql_store import SQLRecordStore

__all__ = ["RecordStore", "SQLRecordStore"]
