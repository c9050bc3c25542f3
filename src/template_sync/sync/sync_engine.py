"""Download and upload reconciliation between the record store and local files."""

import time
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

import structlog

from template_sync.exceptions import GroupNotFound, InvalidGroup
from template_sync.files.local_file_set import LocalFileSet
from template_sync.models.record import DownloadReport, GroupRef, UploadReport
from template_sync.store.record_store import RecordStore
from template_sync.sync.ledger import ModificationLedger
from template_sync.utils.console import StatusReporter

log = structlog.stdlib.get_logger()

CORE_GROUP_ID = -2


class SyncEngine:
    """Orchestrates synchronization between the record store and a template folder."""

    def __init__(
        self,
        store: RecordStore,
        files: LocalFileSet,
        ledger: ModificationLedger,
        reporter: StatusReporter | None = None,
        core_group_id: int = CORE_GROUP_ID,
        properties_key: str = "templateset",
        version_code: str = "1839",
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the sync engine.

        Args:
            store: Remote template store
            files: Local template folder
            ledger: Persistent record of last-seen file mtimes
            reporter: Status line printer (a default console reporter if None)
            core_group_id: Templateset id holding the core templates
            properties_key: Theme property that holds the templateset id
            version_code: Version written on templates inserted by upload
            clock: Source of the creation timestamp for inserted templates
        """
        self._store = store
        self._files = files
        self._ledger = ledger
        self._reporter = reporter or StatusReporter()
        self._core_group_id = core_group_id
        self._properties_key = properties_key
        self._version_code = version_code
        self._clock = clock

        log.info(
            "sync_engine_initialized",
            templates_root=str(files.root),
            ledger=str(ledger.path),
            core_group_id=core_group_id,
        )

    def resolve_group(self, group_name: str) -> GroupRef:
        """
        Resolve a theme name to its templateset id.

        Raises:
            GroupNotFound: If no theme has this name
            InvalidGroup: If the theme has no usable templateset id
        """
        properties = self._store.find_group_properties(group_name)
        if properties is None:
            log.warning("group_not_found", group=group_name)
            raise GroupNotFound(group_name)

        group_id = self._coerce_group_id(properties.get(self._properties_key))
        if not group_id:
            log.warning("group_invalid", group=group_name, key=self._properties_key)
            raise InvalidGroup(group_name)

        return GroupRef(name=group_name, group_id=group_id)

    def download(self, group_name: str) -> list[DownloadReport]:
        """
        Download the core templates and the theme's templates.

        Core templates are only written when no local file exists yet; the
        theme's templates overwrite local files whose content differs.

        Args:
            group_name: Theme name

        Returns:
            One report for the core templateset and one for the theme's

        Raises:
            GroupNotFound: If no theme has this name
            InvalidGroup: If the theme has no usable templateset id
            LedgerCorrupt: If the ledger file cannot be parsed
            InvalidRecord: If a stored row cannot be read as a template
        """
        self._reporter.info(f"Downloading templates for theme '{group_name}'...")
        group = self.resolve_group(group_name)
        mtimes = self._ledger.load()

        log.info("download_started", group=group.name, group_id=group.group_id)

        reports = [
            self.download_group(self._core_group_id, overwrite_on_conflict=False, mtimes=mtimes),
            self.download_group(group.group_id, overwrite_on_conflict=True, mtimes=mtimes),
        ]

        log.info(
            "download_completed",
            group=group.name,
            files_written=sum(r.files_written for r in reports),
        )
        return reports

    def download_group(
        self,
        group_id: int,
        overwrite_on_conflict: bool,
        mtimes: dict[str, int] | None = None,
    ) -> DownloadReport:
        """
        Reconcile one templateset into the local folder.

        Missing files are always created. Files with identical content are
        left alone. Files whose content differs are overwritten only when
        ``overwrite_on_conflict`` is set; otherwise the local copy wins.

        With ``overwrite_on_conflict`` unset (the core templateset) results
        are printed as totals. Otherwise one line is printed per unchanged or
        updated template; new files are only counted.

        Args:
            group_id: Templateset id to reconcile
            overwrite_on_conflict: Whether differing local files are replaced
            mtimes: Ledger mapping to update in place; loaded from the ledger
                    file when not given. The ledger is saved when the
                    templateset is done.
        """
        # Called on its own: start from the persisted mapping
        if mtimes is None:
            mtimes = self._ledger.load()

        report = DownloadReport(group_id=group_id)
        per_record = overwrite_on_conflict

        for record in self._store.list_records(group_id):
            path = self._files.path_for(record.name)
            body = self._files.encode(record.body)

            if not self._files.exists(path):
                self._write(record.name, path, body, mtimes)
                report.downloaded.append(record.name)
                log.debug("template_downloaded", name=record.name, group_id=group_id)
                continue

            if self._files.read(path) == body:
                report.unchanged.append(record.name)
                if per_record:
                    self._reporter.warning(
                        f"Template '{record.name}' has not changed. Skipping..."
                    )
                continue

            if overwrite_on_conflict:
                self._write(record.name, path, body, mtimes)
                report.updated.append(record.name)
                self._reporter.success(f"Template '{record.name}' updated.")
            else:
                # Local edits to core templates are never clobbered.
                report.preserved.append(record.name)
                log.debug("local_template_preserved", name=record.name, group_id=group_id)

        if not per_record:
            if report.downloaded:
                self._reporter.success(f"Downloaded {len(report.downloaded)} core templates.")
            if report.unchanged:
                self._reporter.warning(f"Skipped {len(report.unchanged)} core templates.")

        self._ledger.save(mtimes)

        log.info(
            "group_downloaded",
            group_id=group_id,
            downloaded=len(report.downloaded),
            updated=len(report.updated),
            unchanged=len(report.unchanged),
            preserved=len(report.preserved),
        )
        return report

    def upload(self, group_name: str, names: Iterable[str] = ()) -> UploadReport:
        """
        Push local template files that changed since the last sync.

        A file counts as changed when the ledger has no entry for it or the
        recorded mtime differs from the file's current mtime. Content is not
        compared.

        Args:
            group_name: Theme name
            names: Optional template names to restrict the upload to

        Returns:
            UploadReport listing inserted, updated, skipped and missing templates

        Raises:
            GroupNotFound: If no theme has this name
            InvalidGroup: If the theme has no usable templateset id
            LedgerCorrupt: If the ledger file cannot be parsed
        """
        self._reporter.info(f"Uploading templates for theme '{group_name}'...")
        group = self.resolve_group(group_name)
        mtimes = self._ledger.load()

        requested = set(names)
        report = UploadReport(group=group)
        seen: set[str] = set()

        log.info(
            "upload_started",
            group=group.name,
            group_id=group.group_id,
            requested=sorted(requested),
        )

        for path in self._files.list():
            name = self._files.name_for(path)
            if requested and name not in requested:
                continue
            seen.add(name)

            content = self._files.read(path)
            mtime = self._files.mtime(path)
            existing = self._store.find_record(name, group.group_id)

            # Only the mtime decides; content is not compared
            if mtimes.get(name) == mtime:
                report.skipped.append(name)
                self._reporter.warning(f"Template '{name}' has not changed. Skipping...")
                continue

            body = self._files.decode(content)
            if existing is not None:
                self._store.update_record(name, group.group_id, body)
                report.updated.append(name)
                self._reporter.success(f"Template '{name}' updated in database.")
            else:
                self._store.insert_record(
                    name,
                    group.group_id,
                    body,
                    version=self._version_code,
                    created_at=int(self._clock()),
                )
                report.inserted.append(name)
                self._reporter.success(f"Template '{name}' inserted into database.")

            mtimes[name] = mtime

        # Requested names that matched no local file
        for name in sorted(requested - seen):
            report.missing.append(name)
            self._reporter.warning(f"Template '{name}' has no local file. Skipping...")

        self._ledger.save(mtimes)

        log.info(
            "upload_completed",
            group=group.name,
            inserted=len(report.inserted),
            updated=len(report.updated),
            skipped=len(report.skipped),
            missing=len(report.missing),
        )
        return report

    def _write(self, name: str, path: Path, body: bytes, mtimes: dict[str, int]) -> None:
        self._files.write(path, body)
        mtimes[name] = self._files.mtime(path)

    @staticmethod
    def _coerce_group_id(value: Any) -> int:
        if isinstance(value, bool):
            return 0
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            # PHP serializes whole-number doubles as d:3.0
            return int(value) if value.is_integer() else 0
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                return 0
        return 0
