from __future__ import annotations
import argparse
import json
import logging
import os
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table as RichTable

from .database import Database
from .errors import ConstructionError


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="embedded-json-db", description="Inspect an embedded JSON database file.")
    p.add_argument("-v", "--verbose", action="store_true", help="log debug output to stderr")
    sub = p.add_subparsers(dest="command", required=True)

    t = sub.add_parser("tables", help="list tables with column and record counts")
    t.add_argument("path")

    s = sub.add_parser("schema", help="show the columns of a table")
    s.add_argument("path")
    s.add_argument("table")

    d = sub.add_parser("dump", help="print the records of a table")
    d.add_argument("path")
    d.add_argument("table")
    d.add_argument("--limit", type=int, default=None)
    return p


def _error(console: Console, message: str) -> None:
    console.print(f"[red]{escape(message)}[/red]", soft_wrap=True)


def _cmd_tables(db: Database, console: Console) -> int:
    out = RichTable(title=os.path.basename(db.path))
    out.add_column("table")
    out.add_column("columns", justify="right")
    out.add_column("records", justify="right")
    for name in db.tables():
        out.add_row(name, str(len(db.schema(name).unwrap())), str(db.count(name).unwrap()))
    console.print(out)
    return 0


def _cmd_schema(db: Database, table: str, console: Console) -> int:
    res = db.schema(table)
    if not res:
        _error(console, res.message)
        return 1
    out = RichTable(title=table)
    for col in ("name", "type", "null", "default"):
        out.add_column(col)
    for attr in res.value or []:
        default = "" if attr["default"] is None else json.dumps(attr["default"], ensure_ascii=False)
        out.add_row(attr["name"], attr["type"], "yes" if attr["null"] else "no", default)
    console.print(out)
    return 0


def _cmd_dump(db: Database, table: str, limit: Optional[int], console: Console) -> int:
    res = db.select(table)
    if not res:
        _error(console, res.message)
        return 1
    records = res.value or []
    if limit is not None:
        records = records[:max(0, limit)]
    for rec in records:
        console.print_json(json.dumps(rec, ensure_ascii=False))
    console.print(f"{len(records)} of {len(res.value or [])} records")
    return 0


def main(argv: Optional[List[str]] = None, console: Optional[Console] = None) -> int:
    args = _build_parser().parse_args(argv)
    console = console or Console()
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if not os.path.exists(args.path):
        _error(console, f'The file "{args.path}" does not exist.')
        return 1
    try:
        db = Database(args.path)
    except ConstructionError as exc:
        _error(console, str(exc))
        return 1

    if args.command == "tables":
        return _cmd_tables(db, console)
    if args.command == "schema":
        return _cmd_schema(db, args.table, console)
    return _cmd_dump(db, args.table, args.limit, console)
