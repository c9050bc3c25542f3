"""Tests for the local template folder."""

import os

import pytest
from hypothesis import given
from hypothesis import strategies as st

from template_sync.exceptions import InvalidRecordName
from template_sync.files.local_file_set import LocalFileSet

valid_names = st.text(
    min_size=1,
    max_size=60,
    alphabet=st.characters(blacklist_categories=("Cs",), blacklist_characters="/\\\x00"),
).filter(lambda name: name not in {".", ".."})


@given(name=valid_names)
def test_name_mapping_is_lossless(name: str) -> None:
    """Property: a template name survives the trip to a file path and back."""
    files = LocalFileSet("/srv/templates", extension=".tpl")

    path = files.path_for(name)

    assert path.parent == files.root
    assert path.name.endswith(".tpl")
    assert files.name_for(path) == name


@pytest.mark.parametrize("name", ["", ".", "..", "a/b", "..\\evil", "nul\x00byte"])
def test_unmappable_names_are_rejected(name):
    files = LocalFileSet("/srv/templates")

    with pytest.raises(InvalidRecordName):
        files.path_for(name)


def test_list_returns_sorted_template_files_only(tmp_path):
    files = LocalFileSet(tmp_path, extension=".tpl")
    for name in ["header.tpl", "footer.tpl", "notes.txt", ".tpl", "index.tpl.bak"]:
        (tmp_path / name).write_text("x", encoding="utf-8")
    (tmp_path / "nested.tpl").mkdir()

    assert [p.name for p in files.list()] == ["footer.tpl", "header.tpl"]
    assert [p.name for p in files.list(".txt")] == ["notes.txt"]


def test_list_of_missing_root_is_empty(tmp_path):
    files = LocalFileSet(tmp_path / "does-not-exist")

    assert files.list() == []


def test_write_creates_parent_and_read_returns_bytes(tmp_path):
    files = LocalFileSet(tmp_path / "a" / "b")
    path = files.path_for("header")

    files.write(path, "<div>héllo</div>".encode("utf-8"))

    assert files.exists(path)
    assert files.read(path) == "<div>héllo</div>".encode("utf-8")
    assert files.decode(files.read(path)) == "<div>héllo</div>"


def test_mtime_is_whole_seconds(tmp_path):
    files = LocalFileSet(tmp_path)
    path = files.path_for("header")
    files.write(path, b"x")
    os.utime(path, (1_700_000_123.75, 1_700_000_123.75))

    assert files.mtime(path) == 1_700_000_123
