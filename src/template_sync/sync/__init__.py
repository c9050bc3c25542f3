"""Synchronization components for downloading and uploading templates."""

from template_sync.sync.ledger import ModificationLedger
from template_sync.sync.sync_engine import CORE_GROUP_ID, SyncEngine

__all__ = [
    "CORE_GROUP_ID",
    "ModificationLedger",
    "SyncEngine",
]
