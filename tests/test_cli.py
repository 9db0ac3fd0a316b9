import io

from rich.console import Console

from embedded_json_db import Database
from embedded_json_db.cli import main


def make_db(tmp_path):
    path = tmp_path / "members.json"
    db = Database(path)
    db.create_table("members", [
        {"name": "name", "type": "string"},
        {"name": "age", "type": "number", "null": True, "default": 18},
    ])
    for name in ("Ann", "Bob", "Cid"):
        db.insert("members", {"name": name})
    db.create_table("empty", [])
    return str(path)


def run(argv):
    buf = io.StringIO()
    code = main(argv, console=Console(file=buf, width=120, force_terminal=False))
    return code, buf.getvalue()


def test_tables(tmp_path):
    code, out = run(["tables", make_db(tmp_path)])
    assert code == 0
    assert "members" in out and "empty" in out
    assert "3" in out


def test_schema(tmp_path):
    code, out = run(["schema", make_db(tmp_path), "members"])
    assert code == 0
    assert "number" in out and "18" in out


def test_dump_with_limit(tmp_path):
    code, out = run(["dump", make_db(tmp_path), "members", "--limit", "2"])
    assert code == 0
    assert '"Ann"' in out and '"Bob"' in out
    assert "Cid" not in out
    assert "2 of 3 records" in out


def test_unknown_table(tmp_path):
    code, out = run(["dump", make_db(tmp_path), "nope"])
    assert code == 1
    assert 'The table "nope" does not exist.' in out


def test_missing_file_is_not_created(tmp_path):
    path = tmp_path / "missing.json"
    code, out = run(["tables", str(path)])
    assert code == 1
    assert "does not exist" in out
    assert not path.exists()


def test_corrupt_file(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{oops", encoding="utf-8")
    code, out = run(["tables", str(path)])
    assert code == 1
    assert "cannot be opened" in out
