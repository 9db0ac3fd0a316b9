from __future__ import annotations
import logging
import os
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from .errors import (
    ConstructionError,
    DBError,
    IOCorruptionError,
    InvalidArgument,
    StorageIOError,
    TableAlreadyExists,
    TableNotFound,
)
from .progress import Progress, ProgressCallback
from .query import Predicate, ensure_predicate
from .result import Result
from .schema import Schema
from .storage import FileStorage, PersistenceBackend
from .table import Record, Table

logger = logging.getLogger(__name__)


class Database:
    """
    A set of named tables stored together in one JSON file.

    The whole file is read once when the Database is opened and rewritten
    after every successful mutation. Public operations return a Result;
    expected failures (unknown table, schema violations, write errors) are
    carried in Result.error instead of being raised.

    If a write fails the in-memory change is kept; call flush() to retry or
    reload() to go back to what is on disk.
    """

    def __init__(
        self,
        path: str | os.PathLike,
        *,
        backend: Optional[PersistenceBackend] = None,
        on_progress: Optional[ProgressCallback] = None,
        indent: int | None = 2,
        fsync: bool = True,
    ) -> None:
        if not isinstance(path, (str, os.PathLike)) or not isinstance(os.fspath(path), str):
            raise TypeError(f"Database() argument path: expected str or os.PathLike, got {type(path).__name__}")
        if on_progress is not None and not callable(on_progress):
            raise TypeError("Database() argument on_progress: expected a callable")
        if indent is not None and (not isinstance(indent, int) or isinstance(indent, bool)):
            raise TypeError("Database() argument indent: expected int or None")
        self.path = os.path.abspath(os.path.expanduser(os.fspath(path)))
        self._fs: PersistenceBackend = backend if backend is not None else FileStorage(
            self.path, indent=indent, fsync=fsync
        )
        self._progress = Progress(on_progress)
        self._tables: Dict[str, Table] = {}
        self._open()

    def _open(self) -> None:
        """
        Create the file if missing, then load every table. Any failure here is
        fatal for the instance.
        """
        self._progress.emit("open.start", 0, self.path)
        try:
            if not self._fs.exists():
                logger.info("creating database file %s", self.path)
                self._fs.create_empty()
            self._progress.emit("open.load", 50)
            self._tables = self._read_tables()
        except (StorageIOError, IOCorruptionError) as exc:
            raise ConstructionError(f'The database "{self.path}" cannot be opened: {exc}') from exc
        self._progress.emit("open.done", 100, f"{len(self._tables)} tables")

    def _read_tables(self) -> Dict[str, Table]:
        doc = self._fs.load()
        if not isinstance(doc, dict) or not isinstance(doc.get("tables"), list):
            raise IOCorruptionError('the document must be an object with a "tables" array')
        tables: Dict[str, Table] = {}
        for obj in doc["tables"]:
            table = Table.from_json(obj)
            if table.name in tables:
                raise IOCorruptionError(f'table "{table.name}" is defined twice')
            tables[table.name] = table
        return tables

    # ----- Persistence -----

    def to_document(self) -> Dict[str, Any]:
        return {"tables": [t.to_json() for t in self._tables.values()]}

    def _persist(self) -> None:
        self._progress.emit("save.start", 0)
        self._fs.save(self.to_document())
        self._progress.emit("save.done", 100)

    def _commit(self, op: str, name: str, value: Any = None) -> Result[Any]:
        try:
            self._persist()
        except StorageIOError as exc:
            logger.error("%s on table %r applied in memory but not saved: %s", op, name, exc)
            return Result.failure(exc)
        return Result.success(value)

    @staticmethod
    def _reject(op: str, name: Any, exc: DBError) -> Result[Any]:
        logger.debug("%s on table %r rejected: %s", op, name, exc)
        return Result.failure(exc)

    def flush(self) -> Result[None]:
        """Write the current in-memory state again, e.g. after a failed save."""
        return self._commit("flush", "*")

    def reload(self) -> Result[None]:
        """Drop in-memory state and read the backing file again."""
        try:
            tables = self._read_tables()
        except (StorageIOError, IOCorruptionError) as exc:
            return self._reject("reload", "*", exc)
        self._tables = tables
        return Result.success()

    # ----- Lookup helpers -----

    @staticmethod
    def _check_name(name: Any) -> str:
        if not isinstance(name, str):
            raise InvalidArgument(f"Argument name: {type(name).__name__} is not a string.")
        return name

    def _table(self, name: Any) -> Table:
        table = self._tables.get(self._check_name(name))
        if table is None:
            raise TableNotFound(name)
        return table

    def table_exists(self, name: str) -> bool:
        return isinstance(name, str) and name in self._tables

    def tables(self) -> List[str]:
        return list(self._tables)

    def schema(self, name: str) -> Result[List[Dict[str, Any]]]:
        try:
            return Result.success(self._table(name).schema.to_json())
        except DBError as exc:
            return self._reject("schema", name, exc)

    # ----- Table lifecycle -----

    def create_table(self, name: str, attributes: Sequence[Any]) -> Result[None]:
        """
        Register an empty table. Each attribute is a mapping with "name" and
        optional "type" (string, number, boolean, object, any; default any),
        "null" (default False) and "default".
        """
        try:
            self._check_name(name)
            if name in self._tables:
                raise TableAlreadyExists(name)
            if not isinstance(attributes, (list, tuple)):
                raise InvalidArgument(f"Argument attributes: {type(attributes).__name__} is not a list.")
            schema = Schema.from_specs(attributes)
        except DBError as exc:
            return self._reject("create_table", name, exc)
        self._tables[name] = Table(name=name, schema=schema)
        logger.info("created table %r with columns %s", name, schema.names)
        return self._commit("create_table", name)

    def drop(self, name: str) -> Result[None]:
        try:
            self._table(name)
        except DBError as exc:
            return self._reject("drop", name, exc)
        del self._tables[name]
        logger.info("dropped table %r", name)
        return self._commit("drop", name)

    # ----- Reads -----

    def select(self, name: str, predicate: Optional[Predicate] = None) -> Result[List[Record]]:
        """Copies of the matching records in insertion order."""
        try:
            table = self._table(name)
            pred = ensure_predicate(predicate)
        except DBError as exc:
            return self._reject("select", name, exc)
        return Result.success([table.snapshot(r) for r in table.iter_matching(pred)])

    def each(
        self,
        name: str,
        predicate: Optional[Predicate] = None,
        visit: Optional[Callable[[Record], Any]] = None,
    ) -> Result[int]:
        """
        Call visit(record_copy) for each record matching predicate, in insertion
        order; returns the number of calls. visit is required.
        """
        try:
            table = self._table(name)
            if not callable(visit):
                raise InvalidArgument(f"Argument visit: {type(visit).__name__} is not callable.")
            pred = ensure_predicate(predicate)
        except DBError as exc:
            return self._reject("each", name, exc)
        n = 0
        for rec in table.matching(pred):
            visit(table.snapshot(rec))
            n += 1
        return Result.success(n)

    def count(self, name: str, predicate: Optional[Predicate] = None) -> Result[int]:
        try:
            table = self._table(name)
            pred = ensure_predicate(predicate)
        except DBError as exc:
            return self._reject("count", name, exc)
        return Result.success(sum(1 for _ in table.iter_matching(pred)))

    # ----- Mutations -----

    def insert(self, name: str, record: Mapping[str, Any]) -> Result[int]:
        """Validate and append a record; the result value is its new _id."""
        try:
            table = self._table(name)
            if not isinstance(record, Mapping):
                raise InvalidArgument(f"Argument record: {type(record).__name__} is not a mapping.")
            values = table.schema.validate(record)
        except DBError as exc:
            return self._reject("insert", name, exc)
        rec_id = table.append(values)
        return self._commit("insert", name, rec_id)

    def update(
        self,
        name: str,
        patch: Mapping[str, Any],
        predicate: Optional[Predicate] = None,
    ) -> Result[int]:
        """
        Merge patch into every matching record. The patch is validated before
        any record changes, so a rejected update leaves the table untouched.
        Returns the number of records updated; the file is written even when
        nothing matched.
        """
        try:
            table = self._table(name)
            if not isinstance(patch, Mapping):
                raise InvalidArgument(f"Argument patch: {type(patch).__name__} is not a mapping.")
            pred = ensure_predicate(predicate)
            values = table.schema.validate_patch(patch)
        except DBError as exc:
            return self._reject("update", name, exc)
        targets = table.matching(pred)
        for rec in targets:
            rec.update(table.snapshot(values))
        return self._commit("update", name, len(targets))

    def delete(self, name: str, predicate: Optional[Predicate] = None) -> Result[int]:
        """Remove matching records; ids of the remaining records are unchanged."""
        try:
            table = self._table(name)
            pred = ensure_predicate(predicate)
        except DBError as exc:
            return self._reject("delete", name, exc)
        n = table.remove_matching(pred)
        return self._commit("delete", name, n)
