import json
from pathlib import Path

import pytest
from rich.console import Console

from embedded_json_db import ConstructionError, Database

_console = Console(force_terminal=True, color_system="standard")


def progress_printer(evt):
    phase = evt.get("phase", "")
    pct = int(evt.get("pct", 0))
    msg = evt.get("msg", "")
    parts = [phase, f"{pct}%"]
    if msg:
        parts.append(f"- {msg}")
    _console.print(f"[progress] {' '.join(parts)}", highlight=False, markup=False)


def make_schema():
    return [
        {"name": "name", "type": "string"},
        {"name": "age", "type": "number", "null": True, "default": 18},
        {"name": "active", "type": "boolean", "default": False},
        {"name": "tags", "type": "object", "null": True},
    ]


def read_json(path):
    return json.loads(Path(path).read_text(encoding="utf-8"))


def test_missing_file_is_created_empty(tmp_path):
    db_path = tmp_path / "members.json"
    db = Database(str(db_path), on_progress=progress_printer)
    assert db_path.exists()
    assert read_json(db_path) == {"tables": []}
    assert db.tables() == []


def test_missing_parent_directories_are_created(tmp_path):
    db_path = tmp_path / "data" / "nested" / "db.json"
    Database(db_path)
    assert read_json(db_path) == {"tables": []}


@pytest.mark.parametrize("content", ["", "   ", "\n\r\n\t"])
def test_blank_file_is_rewritten(tmp_path, content):
    db_path = tmp_path / "blank.json"
    db_path.write_text(content, encoding="utf-8")
    db = Database(db_path)
    assert db.tables() == []
    assert read_json(db_path) == {"tables": []}


@pytest.mark.parametrize("content", [
    "{not json",
    "[]",
    '{"tables": {}}',
    '{"other": []}',
    '{"tables": [{"_records": []}]}',
    '{"tables": [{"_name": "t", "_records": [{"x": 1}], "_attributes": []}]}',
    '{"tables": [{"_name": "t", "_records": [{"_id": 1}, {"_id": 1}], "_attributes": []}]}',
    '{"tables": [{"_name": "t", "_records": [], "_attributes": [{"name": "x"}, {"name": "x"}]}]}',
    '{"tables": [{"_name": "t", "_records": []}, {"_name": "t", "_records": []}]}',
])
def test_malformed_file_is_fatal(tmp_path, content):
    db_path = tmp_path / "bad.json"
    db_path.write_text(content, encoding="utf-8")
    with pytest.raises(ConstructionError):
        Database(db_path)


@pytest.mark.parametrize("path", [None, 42, b"db.json", ["db.json"]])
def test_bad_path_argument(path):
    with pytest.raises(TypeError):
        Database(path)


def test_bad_keyword_arguments(tmp_path):
    with pytest.raises(TypeError):
        Database(tmp_path / "a.json", on_progress="nope")
    with pytest.raises(TypeError):
        Database(tmp_path / "b.json", indent="2")


def test_existing_file_written_by_hand(tmp_path):
    db_path = tmp_path / "legacy.json"
    db_path.write_text(json.dumps({
        "tables": [{
            "_name": "members",
            "_records": [{"name": "Jean Doe", "age": 37, "_id": 1}],
            "_attributes": [
                {"name": "name", "type": "string", "null": False, "default": None},
                {"name": "age", "type": "number", "null": False, "default": None},
            ],
        }],
    }), encoding="utf-8")
    db = Database(db_path)
    assert db.table_exists("members")
    assert db.select("members").unwrap() == [{"name": "Jean Doe", "age": 37, "_id": 1}]
    assert db.insert("members", {"name": "Ann", "age": 20}).unwrap() == 2


def test_round_trip(tmp_path):
    db_path = tmp_path / "members.json"
    db = Database(str(db_path), on_progress=progress_printer)
    assert db.create_table("members", make_schema())
    assert db.create_table("empty", [])
    assert db.insert("members", {"name": "Ann"})
    assert db.insert("members", {"name": "Bob", "age": 40, "tags": ["x", {"k": 1}], "nick": "b"})
    assert db.insert("members", {"name": "Cid", "age": 2.5, "tags": ("t",)})

    db2 = Database(str(db_path))
    assert db2.to_document() == db.to_document()
    assert db2.tables() == ["members", "empty"]
    assert db2.schema("members").unwrap() == db.schema("members").unwrap()
    assert db2.select("members").unwrap() == db.select("members").unwrap()
    assert db2.select("members", lambda r: r["_id"] == 3).unwrap()[0]["tags"] == ["t"]


def test_file_layout(tmp_path):
    db_path = tmp_path / "members.json"
    db = Database(db_path)
    db.create_table("members", [{"name": "name", "type": "string"}])
    db.insert("members", {"name": "Ann"})
    assert read_json(db_path) == {
        "tables": [{
            "_name": "members",
            "_records": [{"name": "Ann", "_id": 1}],
            "_attributes": [{"name": "name", "type": "string", "null": False, "default": None}],
        }],
    }
    # Default indent is 2
    assert '\n  "tables"' in db_path.read_text(encoding="utf-8")


def test_progress_events(tmp_path):
    events = []

    def collect(evt):
        events.append(evt.get("phase"))

    db = Database(tmp_path / "events.json", on_progress=collect)
    assert events[0] == "open.start"
    assert events[-1] == "open.done"
    assert "open.load" in events

    events.clear()
    db.create_table("t", [])
    assert events == ["save.start", "save.done"]

    # Reads and rejected calls do not write
    events.clear()
    db.select("t")
    db.count("t")
    db.insert("missing", {})
    assert events == []


def test_reload_discards_unsaved_state(tmp_path):
    db_path = tmp_path / "reload.json"
    db = Database(db_path)
    db.create_table("t", [])
    other = Database(db_path)
    other.insert("t", {"x": 1})

    assert db.count("t").unwrap() == 0
    assert db.reload()
    assert db.count("t").unwrap() == 1


def test_reload_keeps_state_when_file_is_broken(tmp_path):
    db_path = tmp_path / "reload.json"
    db = Database(db_path)
    db.create_table("t", [])
    db_path.write_text("{broken", encoding="utf-8")

    res = db.reload()
    assert not res
    assert res.error.code == "io_corruption"
    assert db.table_exists("t")


def test_file_that_is_not_utf8_is_fatal(tmp_path):
    db_path = tmp_path / "latin.json"
    db_path.write_bytes(b'{"tables": ["\xff\xfe"]}')
    with pytest.raises(ConstructionError):
        Database(db_path)


@pytest.mark.parametrize("constant", ["NaN", "Infinity", "-Infinity"])
def test_non_standard_constants_are_fatal(tmp_path, constant):
    db_path = tmp_path / "nan.json"
    db_path.write_text(
        '{"tables": [{"_name": "t", "_records": [{"x": %s, "_id": 1}], "_attributes": []}]}' % constant,
        encoding="utf-8",
    )
    with pytest.raises(ConstructionError):
        Database(db_path)


def test_reload_reports_file_that_is_not_utf8(tmp_path):
    db_path = tmp_path / "reload.json"
    db = Database(db_path)
    db.create_table("t", [])
    db_path.write_bytes(b"\xff\xfe\x00")

    res = db.reload()
    assert res.error.code == "io_corruption"
    assert db.table_exists("t")
