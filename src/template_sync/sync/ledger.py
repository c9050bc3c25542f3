"""Persistent record of the last-seen modification time of every template file."""

import json
import os
import tempfile
from pathlib import Path
from typing import Any

import structlog
from pydantic import TypeAdapter, ValidationError

from template_sync.exceptions import LedgerCorrupt

log = structlog.stdlib.get_logger()

# The PHP helper wrote an empty history as a JSON list.
_LEDGER_ADAPTER: TypeAdapter[dict[str, int] | list[Any]] = TypeAdapter(dict[str, int] | list[Any])


class ModificationLedger:
    """Stores a flat ``{template name: mtime}`` mapping in a JSON file.

    The ledger is always read and written as a whole. Callers mutate the
    mapping returned by :meth:`load` and hand it back to :meth:`save` once
    per logical operation.
    """

    def __init__(self, path: Path | str):
        """
        Initialize the ledger.

        Args:
            path: Location of the JSON file backing the ledger
        """
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, int]:
        """
        Load the persisted mapping.

        Returns:
            Mapping of template name to last-seen mtime; empty if the file
            does not exist yet

        Raises:
            LedgerCorrupt: If the file exists but is not a JSON object of
                           names to integer timestamps
        """
        if not self._path.exists():
            log.info("ledger_not_found", path=str(self._path))
            return {}

        raw = self._path.read_bytes()

        try:
            content = _LEDGER_ADAPTER.validate_json(raw, strict=True)
        except ValidationError as e:
            log.error("ledger_corrupt", path=str(self._path), error=str(e))
            raise LedgerCorrupt(self._path, str(e)) from e

        if isinstance(content, list):
            if content:
                log.error("ledger_corrupt", path=str(self._path), error="non-empty list")
                raise LedgerCorrupt(self._path, "expected an object, got a non-empty list")
            return {}

        log.info("ledger_loaded", path=str(self._path), entries=len(content))
        return content

    def save(self, mtimes: dict[str, int]) -> None:
        """
        Overwrite the persisted mapping with ``mtimes``.

        The file is written to a temporary sibling first and moved into place,
        so readers never observe a half-written ledger.

        Args:
            mtimes: Complete mapping of template name to mtime
        """
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(mtimes, indent=4, sort_keys=True)

        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload + "\n")
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        log.info("ledger_saved", path=str(self._path), entries=len(mtimes))
