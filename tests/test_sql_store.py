"""Tests for the SQLAlchemy record store against a SQLite forum database."""

import pytest
from sqlalchemy import inspect

from template_sync.exceptions import InvalidRecord
from template_sync.models.config import DatabaseConfig
from template_sync.models.record import Record
from template_sync.store.sql_store import SQLRecordStore, decode_properties


@pytest.fixture
def store(forum):
    store = SQLRecordStore(forum.engine, table_prefix="mybb_", properties_format="php")
    store.create_schema()
    return store


class TestDecodeProperties:
    def test_php_serialized_properties(self):
        raw = 'a:2:{s:11:"templateset";i:3;s:7:"imgdir";s:6:"images";}'

        assert decode_properties(raw, "php") == {"templateset": 3, "imgdir": "images"}

    def test_php_string_id_is_kept_as_string(self):
        raw = 'a:1:{s:11:"templateset";s:1:"7";}'

        assert decode_properties(raw, "php") == {"templateset": "7"}

    def test_json_properties(self):
        assert decode_properties('{"templateset": 5}', "json") == {"templateset": 5}

    @pytest.mark.parametrize("raw", ["", None, "[]"])
    def test_empty_or_non_mapping_values(self, raw):
        assert decode_properties(raw, "json") == {}

    def test_undecodable_value_raises(self):
        with pytest.raises(ValueError):
            decode_properties("{broken", "json")

    def test_unknown_format_raises(self):
        with pytest.raises(ValueError):
            decode_properties("x", "xml")


class TestFindGroupProperties:
    def test_returns_decoded_properties(self, forum, store):
        forum.add_theme("Default", 'a:1:{s:11:"templateset";i:3;}')

        assert store.find_group_properties("Default") == {"templateset": 3}

    def test_unknown_theme_returns_none(self, forum, store):
        forum.add_theme("Default")

        assert store.find_group_properties("Nope") is None

    def test_theme_name_is_bound_not_interpolated(self, forum, store):
        forum.add_theme("Default")

        assert store.find_group_properties("x' OR '1'='1") is None

    def test_json_properties_format(self, forum):
        store = SQLRecordStore(forum.engine, properties_format="json")
        store.create_schema()
        forum.add_theme("Modern", '{"templateset": 9}')

        assert store.find_group_properties("Modern") == {"templateset": 9}

    def test_undecodable_properties_are_empty(self, forum, store):
        forum.add_theme("Garbled", "a:1:{s:11:")

        assert store.find_group_properties("Garbled") == {}


class TestRecords:
    def test_list_records_filters_by_group_and_sorts(self, forum, store):
        forum.add_template("header", "A", sid=3)
        forum.add_template("footer", "B", sid=3)
        forum.add_template("header", "core header", sid=-2)

        records = store.list_records(3)

        assert [(r.name, r.body, r.group_id) for r in records] == [
            ("footer", "B", 3),
            ("header", "A", 3),
        ]

    def test_find_record(self, forum, store):
        forum.add_template("header", "A", sid=3, version="1800", dateline=42)

        assert store.find_record("header", 3) == Record(
            name="header", group_id=3, body="A", version="1800", created_at=42
        )
        assert store.find_record("header", 4) is None
        assert store.find_record("footer", 3) is None

    def test_update_replaces_only_the_body(self, forum, store):
        forum.add_template("header", "A", sid=3, version="1800", dateline=42)
        forum.add_template("header", "core", sid=-2)

        store.update_record("header", 3, "A2")

        row = forum.row("header", 3)
        assert row.template == "A2"
        assert row.version == "1800"
        assert row.dateline == 42
        assert forum.bodies(-2) == {"header": "core"}

    def test_insert_record(self, forum, store):
        store.insert_record("sidebar", 3, "<aside/>", version="1839", created_at=1_700_000_000)

        row = forum.row("sidebar", 3)
        assert row.template == "<aside/>"
        assert row.version == "1839"
        assert row.dateline == 1_700_000_000

    def test_negative_dateline_is_read(self, forum, store):
        forum.add_template("header", "A", sid=3, dateline=-1)

        assert store.find_record("header", 3).created_at == -1

    def test_row_without_title_raises_invalid_record(self, forum, store):
        forum.add_template("", "orphan", sid=3)

        with pytest.raises(InvalidRecord) as exc_info:
            store.list_records(3)

        assert exc_info.value.name == ""


def test_from_config_builds_working_store(tmp_path):
    config = DatabaseConfig(
        url=f"sqlite:///{tmp_path / 'forum.db'}", table_prefix="bb_", properties_format="json"
    )

    store = SQLRecordStore.from_config(config)
    try:
        store.create_schema()
        store.insert_record("header", 1, "A", version="1839", created_at=1)

        assert [r.name for r in store.list_records(1)] == ["header"]
        assert inspect(store.engine).has_table("bb_templates")
    finally:
        store.dispose()
