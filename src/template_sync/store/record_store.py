"""Record store interface used by the sync engine."""

from abc import ABC, abstractmethod
from typing import Any

from template_sync.models.record import Record


class RecordStore(ABC):
    """Abstract interface for the remote template store.

    Implementations own connection handling and query escaping; the sync
    engine only ever calls these typed operations.
    """

    @abstractmethod
    def find_group_properties(self, name: str) -> dict[str, Any] | None:
        """Return the decoded properties of the theme called ``name``.

        Args:
            name: Theme name

        Returns:
            Decoded properties mapping, or None if no theme matches
        """

    @abstractmethod
    def list_records(self, group_id: int) -> list[Record]:
        """Return every template stored in templateset ``group_id``."""

    @abstractmethod
    def find_record(self, name: str, group_id: int) -> Record | None:
        """Return the template ``name`` in templateset ``group_id``, if any."""

    @abstractmethod
    def update_record(self, name: str, group_id: int, body: str) -> None:
        """Replace the body of an existing template, leaving other fields untouched."""

    @abstractmethod
    def insert_record(
        self, name: str, group_id: int, body: str, version: str, created_at: int
    ) -> None:
        """Insert a new template row."""
