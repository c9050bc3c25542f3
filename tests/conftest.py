"""Shared fixtures: a throwaway SQLite forum database and a wired sync engine."""

import io
import os
from dataclasses import dataclass
from pathlib import Path
from unittest.mock import Mock

import pytest
from rich.console import Console
from sqlalchemy import MetaData, create_engine, insert, select

from template_sync.files.local_file_set import LocalFileSet
from template_sync.store.sql_store import SQLRecordStore, build_tables
from template_sync.sync.ledger import ModificationLedger
from template_sync.sync.sync_engine import SyncEngine
from template_sync.utils.console import STATUS_THEME, StatusReporter

DEFAULT_PROPERTIES = 'a:2:{s:11:"templateset";i:3;s:11:"editortheme";s:7:"default";}'
CREATED_AT = 1_700_000_000


class Forum:
    """Seeds and inspects the forum tables behind an SQLRecordStore."""

    def __init__(self, db_path: Path):
        self.url = f"sqlite:///{db_path}"
        self.engine = create_engine(self.url)
        self.themes, self.templates = build_tables(MetaData(), "mybb_")

    def add_theme(self, name: str, properties: str = DEFAULT_PROPERTIES) -> None:
        with self.engine.begin() as conn:
            conn.execute(insert(self.themes).values(name=name, properties=properties))

    def add_template(
        self, title: str, body: str, sid: int, version: str = "1800", dateline: int = 1
    ) -> None:
        with self.engine.begin() as conn:
            conn.execute(
                insert(self.templates).values(
                    title=title, template=body, sid=sid, version=version, dateline=dateline
                )
            )

    def bodies(self, sid: int) -> dict[str, str]:
        t = self.templates
        with self.engine.connect() as conn:
            rows = conn.execute(select(t.c.title, t.c.template).where(t.c.sid == sid))
            return {row.title: row.template for row in rows}

    def row(self, title: str, sid: int):
        t = self.templates
        with self.engine.connect() as conn:
            return conn.execute(
                select(t).where(t.c.title == title, t.c.sid == sid)
            ).first()


@dataclass
class SyncEnv:
    """A sync engine wired to a temporary forum database and template folder."""

    forum: Forum
    store: SQLRecordStore
    spy: Mock
    files: LocalFileSet
    ledger: ModificationLedger
    engine: SyncEngine
    stdout: io.StringIO
    stderr: io.StringIO

    def output(self) -> str:
        return self.stdout.getvalue()

    def path(self, name: str) -> Path:
        return self.files.path_for(name)

    def edit(self, name: str, content: str, bump: int = 10) -> None:
        """Rewrite a local file and move its mtime forward by ``bump`` seconds."""
        path = self.path(name)
        old = self.files.mtime(path) if path.exists() else CREATED_AT
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        os.utime(path, (old + bump, old + bump))

    def store_writes(self) -> int:
        return self.spy.update_record.call_count + self.spy.insert_record.call_count


def make_reporter() -> tuple[StatusReporter, io.StringIO, io.StringIO]:
    stdout, stderr = io.StringIO(), io.StringIO()
    reporter = StatusReporter(
        console=Console(file=stdout, theme=STATUS_THEME, width=200),
        error_console=Console(file=stderr, theme=STATUS_THEME, width=200),
    )
    return reporter, stdout, stderr


def build_env(root: Path) -> SyncEnv:
    """Create a forum database with a 'Default' theme (templateset 3) under ``root``."""
    forum = Forum(root / "forum.db")
    store = SQLRecordStore(forum.engine, table_prefix="mybb_", properties_format="php")
    store.create_schema()
    forum.add_theme("Default")

    spy = Mock(wraps=store)
    files = LocalFileSet(root / ".temp" / "templates", extension=".tpl")
    ledger = ModificationLedger(root / ".temp" / "history.json")
    reporter, stdout, stderr = make_reporter()
    engine = SyncEngine(
        store=spy,
        files=files,
        ledger=ledger,
        reporter=reporter,
        version_code="1839",
        clock=lambda: CREATED_AT,
    )
    return SyncEnv(forum, store, spy, files, ledger, engine, stdout, stderr)


@pytest.fixture
def env(tmp_path: Path) -> SyncEnv:
    sync_env = build_env(tmp_path)
    yield sync_env
    sync_env.forum.engine.dispose()


@pytest.fixture
def forum(tmp_path: Path) -> Forum:
    forum = Forum(tmp_path / "forum.db")
    yield forum
    forum.engine.dispose()


@pytest.fixture
def make_env():
    """Factory for property tests that need a fresh environment per example."""
    return build_env
