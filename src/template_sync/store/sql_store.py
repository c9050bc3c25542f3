"""SQLAlchemy implementation of the record store over the forum tables."""

import json
from typing import Any

import phpserialize
import structlog
from pydantic import ValidationError
from sqlalchemy import (
    Column,
    Engine,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    insert,
    select,
    update,
)

from template_sync.exceptions import InvalidRecord
from template_sync.models.config import DatabaseConfig
from template_sync.models.record import Record
from template_sync.store.record_store import RecordStore

log = structlog.stdlib.get_logger()


def decode_properties(raw: str | bytes | None, properties_format: str = "php") -> dict[str, Any]:
    """
    Decode a themes.properties value into a mapping.

    Args:
        raw: Column value as stored by the forum
        properties_format: "php" for PHP serialize() output, "json" for JSON

    Returns:
        Decoded properties; empty if the column is empty or not a mapping

    Raises:
        ValueError: If the value cannot be decoded in the given format
    """
    if not raw:
        return {}

    if properties_format == "json":
        decoded = json.loads(raw)
    elif properties_format == "php":
        data = raw.encode("utf-8") if isinstance(raw, str) else raw
        decoded = phpserialize.loads(data, decode_strings=True)
    else:
        raise ValueError(f"Unsupported properties format: {properties_format}")

    if not isinstance(decoded, dict):
        return {}
    return {str(key): value for key, value in decoded.items()}


def build_tables(metadata: MetaData, prefix: str) -> tuple[Table, Table]:
    """Declare the subset of the forum schema the store reads and writes."""
    themes = Table(
        f"{prefix}themes",
        metadata,
        Column("tid", Integer, primary_key=True, autoincrement=True),
        Column("name", String(100), nullable=False, default=""),
        Column("properties", Text, nullable=False, default=""),
    )
    templates = Table(
        f"{prefix}templates",
        metadata,
        Column("tid", Integer, primary_key=True, autoincrement=True),
        Column("title", String(120), nullable=False, default=""),
        Column("template", Text, nullable=False, default=""),
        Column("sid", Integer, nullable=False, default=0),
        Column("version", String(20), nullable=False, default="0"),
        Column("dateline", Integer, nullable=False, default=0),
    )
    return themes, templates


class SQLRecordStore(RecordStore):
    """Record store backed by the forum's ``themes`` and ``templates`` tables."""

    def __init__(
        self,
        engine: Engine,
        table_prefix: str = "mybb_",
        properties_format: str = "php",
    ):
        """
        Initialize the store.

        Args:
            engine: SQLAlchemy engine connected to the forum database
            table_prefix: Prefix of the forum tables
            properties_format: Encoding of the themes.properties column
        """
        self._engine = engine
        self._properties_format = properties_format
        self._metadata = MetaData()
        self._themes, self._templates = build_tables(self._metadata, table_prefix)
        log.info(
            "sql_record_store_initialized",
            table_prefix=table_prefix,
            properties_format=properties_format,
        )

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> "SQLRecordStore":
        """Create a store and its engine from database configuration."""
        engine = create_engine(config.url, echo=config.echo)
        return cls(
            engine,
            table_prefix=config.table_prefix,
            properties_format=config.properties_format,
        )

    @property
    def engine(self) -> Engine:
        return self._engine

    def create_schema(self) -> None:
        """Create the themes and templates tables if they do not exist."""
        self._metadata.create_all(self._engine)

    def dispose(self) -> None:
        self._engine.dispose()

    def find_group_properties(self, name: str) -> dict[str, Any] | None:
        stmt = select(self._themes.c.properties).where(self._themes.c.name == name).limit(1)
        with self._engine.connect() as conn:
            row = conn.execute(stmt).first()

        if row is None:
            log.info("theme_not_found", theme=name)
            return None

        try:
            properties = decode_properties(row.properties, self._properties_format)
        except ValueError as e:
            log.warning("theme_properties_undecodable", theme=name, error=str(e))
            return {}
        log.debug("theme_properties_loaded", theme=name, keys=sorted(properties))
        return properties

    def list_records(self, group_id: int) -> list[Record]:
        t = self._templates
        stmt = (
            select(t.c.title, t.c.template, t.c.sid, t.c.version, t.c.dateline)
            .where(t.c.sid == group_id)
            .order_by(t.c.title)
        )
        with self._engine.connect() as conn:
            records = [self._to_record(row) for row in conn.execute(stmt)]

        log.info("templates_listed", group_id=group_id, count=len(records))
        return records

    def find_record(self, name: str, group_id: int) -> Record | None:
        t = self._templates
        stmt = (
            select(t.c.title, t.c.template, t.c.sid, t.c.version, t.c.dateline)
            .where(t.c.title == name, t.c.sid == group_id)
            .limit(1)
        )
        with self._engine.connect() as conn:
            row = conn.execute(stmt).first()
        return self._to_record(row) if row is not None else None

    def update_record(self, name: str, group_id: int, body: str) -> None:
        t = self._templates
        stmt = update(t).where(t.c.title == name, t.c.sid == group_id).values(template=body)
        with self._engine.begin() as conn:
            result = conn.execute(stmt)
        log.info("template_updated", name=name, group_id=group_id, rows=result.rowcount)

    def insert_record(
        self, name: str, group_id: int, body: str, version: str, created_at: int
    ) -> None:
        stmt = insert(self._templates).values(
            title=name,
            template=body,
            sid=group_id,
            version=version,
            dateline=created_at,
        )
        with self._engine.begin() as conn:
            conn.execute(stmt)
        log.info("template_inserted", name=name, group_id=group_id, version=version)

    @staticmethod
    def _to_record(row: Any) -> Record:
        try:
            return Record(
                name=row.title,
                group_id=row.sid,
                body=row.template or "",
                version=str(row.version or ""),
                created_at=row.dateline or 0,
            )
        except ValidationError as e:
            log.error("template_row_invalid", title=row.title, sid=row.sid, error=str(e))
            raise InvalidRecord(row.title, str(e)) from e
