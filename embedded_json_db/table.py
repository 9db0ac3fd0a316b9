from __future__ import annotations
import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping

from .errors import IOCorruptionError, SchemaError
from .query import Predicate, readonly
from .schema import ID_FIELD, Schema


class Record(dict):
    """
    Dict of attribute values plus the "_id" assigned on insert. Undeclared
    keys are kept as stored.
    """
    __slots__ = ()

    @property
    def id(self) -> int | None:
        return self.get(ID_FIELD)


@dataclass
class Table:
    name: str
    schema: Schema
    records: List[Dict[str, Any]] = field(default_factory=list)

    def next_id(self) -> int:
        if not self.records:
            return 1
        return max(r[ID_FIELD] for r in self.records) + 1

    def iter_matching(self, predicate: Predicate) -> Iterator[Dict[str, Any]]:
        for rec in self.records:
            if predicate(readonly(rec)):
                yield rec

    def matching(self, predicate: Predicate) -> List[Dict[str, Any]]:
        # Materialized before any mutation so a failing predicate changes nothing
        return list(self.iter_matching(predicate))

    def append(self, values: Dict[str, Any]) -> int:
        rec_id = self.next_id()
        values[ID_FIELD] = rec_id
        self.records.append(values)
        return rec_id

    def remove_matching(self, predicate: Predicate) -> int:
        doomed = {id(r) for r in self.matching(predicate)}
        if doomed:
            self.records = [r for r in self.records if id(r) not in doomed]
        return len(doomed)

    def snapshot(self, rec: Mapping[str, Any]) -> Record:
        return Record(copy.deepcopy(dict(rec)))

    def to_json(self) -> Dict[str, Any]:
        return {
            "_name": self.name,
            "_records": copy.deepcopy(self.records),
            "_attributes": self.schema.to_json(),
        }

    @classmethod
    def from_json(cls, obj: Any) -> "Table":
        if not isinstance(obj, dict):
            raise IOCorruptionError("table entry is not an object")
        name = obj.get("_name")
        if not isinstance(name, str):
            raise IOCorruptionError("table entry has no string _name")
        attrs = obj.get("_attributes", [])
        records = obj.get("_records", [])
        if not isinstance(attrs, list) or not isinstance(records, list):
            raise IOCorruptionError(f'table "{name}": _attributes and _records must be arrays')
        try:
            schema = Schema.from_specs(attrs)
        except SchemaError as exc:
            raise IOCorruptionError(f'table "{name}": {exc}') from exc
        seen: set[int] = set()
        for rec in records:
            rec_id = rec.get(ID_FIELD) if isinstance(rec, dict) else None
            if not isinstance(rec_id, int) or isinstance(rec_id, bool):
                raise IOCorruptionError(f'table "{name}": record without an integer _id')
            if rec_id in seen:
                raise IOCorruptionError(f'table "{name}": duplicate _id {rec_id}')
            seen.add(rec_id)
        return cls(name=name, schema=schema, records=records)
