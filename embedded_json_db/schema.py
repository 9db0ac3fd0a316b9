from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

from .errors import (
    DuplicateColumn,
    InvalidAttributeSpec,
    InvalidNumericValue,
    MissingColumnName,
    MissingRequiredField,
    NullNotAllowed,
    ReservedField,
    TypeMismatch,
    UnknownColumn,
    UnserializableValue,
    ValidationError,
)
from .result import Result
from .utils import is_bad_number, is_json_value, json_copy, type_name

ID_FIELD = "_id"

ATTRIBUTE_TYPES = ("string", "number", "boolean", "object", "any")

# Keys of an attribute entry as written in the "_attributes" list of a table
_SPEC_KEYS = {"name", "type", "null", "default"}


def _matches_type(attr_type: str, value: Any) -> bool:
    if attr_type == "any":
        return True
    if attr_type == "string":
        return isinstance(value, str)
    if attr_type == "number":
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if attr_type == "boolean":
        return isinstance(value, bool)
    if attr_type == "object":
        return isinstance(value, (dict, list, tuple))
    return False


@dataclass(frozen=True)
class Attribute:
    """
    One declared column. A default of None means "no default": the file
    format stores absent defaults as null.
    """
    name: str
    type: str = "any"
    nullable: bool = False
    default: Any = None

    @property
    def has_default(self) -> bool:
        return self.default is not None

    def check(self, value: Any) -> None:
        """Apply the per-value rules (null, numeric, type, JSON) or raise ValidationError."""
        if value is None:
            if not self.nullable:
                raise NullNotAllowed(self.name)
            return
        if self.type == "number" and is_bad_number(value):
            raise InvalidNumericValue(self.name, value)
        if not _matches_type(self.type, value):
            raise TypeMismatch(self.name, self.type, type_name(value))
        if not is_json_value(value):
            raise UnserializableValue(self.name)

    def to_json(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "null": self.nullable,
            "default": json_copy(self.default),
        }


def _parse_attribute(position: int, spec: Any) -> Attribute:
    if isinstance(spec, Attribute):
        spec = spec.to_json()
    if not isinstance(spec, Mapping):
        raise InvalidAttributeSpec(f"Attribute #{position}: each attribute must be an object.")
    name = spec.get("name")
    if not isinstance(name, str) or name == "":
        raise MissingColumnName(position)
    unknown = sorted(set(spec) - _SPEC_KEYS)
    if unknown:
        raise InvalidAttributeSpec(f'Attribute "{name}": unknown keys {", ".join(map(str, unknown))}.')
    if name == ID_FIELD:
        raise InvalidAttributeSpec(f'Attribute "{name}": the name is reserved for record ids.')
    attr_type = spec.get("type")
    if attr_type is None:
        attr_type = "any"
    if attr_type not in ATTRIBUTE_TYPES:
        raise InvalidAttributeSpec(
            f'Attribute "{name}": type must be one of {", ".join(ATTRIBUTE_TYPES)} (got {attr_type!r}).'
        )
    nullable = spec.get("null")
    if nullable is None:
        nullable = False
    if not isinstance(nullable, bool):
        raise InvalidAttributeSpec(f'Attribute "{name}": "null" must be a boolean.')
    attr = Attribute(name=name, type=attr_type, nullable=nullable, default=json_copy(spec.get("default")))
    if attr.has_default:
        try:
            attr.check(attr.default)
        except ValidationError as exc:
            raise InvalidAttributeSpec(f'Attribute "{name}": invalid default. {exc}') from exc
    return attr


class Schema:
    """Ordered attribute declarations of one table."""

    def __init__(self, attributes: Iterable[Attribute] = ()) -> None:
        self._attributes: List[Attribute] = list(attributes)
        self._by_name: Dict[str, Attribute] = {a.name: a for a in self._attributes}

    @classmethod
    def from_specs(cls, specs: Iterable[Any]) -> "Schema":
        """
        Build a schema from attribute entries ({"name", "type", "null", "default"}
        mappings or Attribute instances). Raises SchemaError subclasses.
        """
        attrs: List[Attribute] = []
        seen: set[str] = set()
        for position, spec in enumerate(specs, 1):
            attr = _parse_attribute(position, spec)
            if attr.name in seen:
                raise DuplicateColumn(attr.name)
            seen.add(attr.name)
            attrs.append(attr)
        return cls(attrs)

    def __iter__(self) -> Iterator[Attribute]:
        return iter(self._attributes)

    def __len__(self) -> int:
        return len(self._attributes)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Schema):
            return NotImplemented
        return self._attributes == other._attributes

    def __repr__(self) -> str:
        return f"Schema({self._attributes!r})"

    def get(self, name: str) -> Optional[Attribute]:
        return self._by_name.get(name)

    @property
    def names(self) -> List[str]:
        return [a.name for a in self._attributes]

    def to_json(self) -> List[Dict[str, Any]]:
        return [a.to_json() for a in self._attributes]

    def validate(self, candidate: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Full validation used by insert. Returns the candidate (copied) with
        defaults and nulls filled in for missing attributes; undeclared keys
        are kept as given.
        """
        out: Dict[str, Any] = {k: json_copy(v) for k, v in candidate.items()}
        for attr in self._attributes:
            if attr.name not in out:
                if attr.has_default:
                    out[attr.name] = json_copy(attr.default)
                elif attr.nullable:
                    out[attr.name] = None
                else:
                    raise MissingRequiredField(attr.name)
            attr.check(out[attr.name])
        # Undeclared keys are checked only once every declared attribute passed
        if ID_FIELD in candidate:
            raise ReservedField(ID_FIELD)
        for key, value in candidate.items():
            if not isinstance(key, str) or (key not in self._by_name and not is_json_value(value)):
                raise UnserializableValue(str(key))
        return out

    def validate_patch(self, patch: Mapping[str, Any]) -> Dict[str, Any]:
        """Restricted validation used by update: only the keys present, no defaults."""
        for key in patch:
            if key not in self._by_name:
                raise UnknownColumn(str(key))
        for attr in self._attributes:
            if attr.name in patch:
                attr.check(patch[attr.name])
        return {k: json_copy(v) for k, v in patch.items()}


def validate(schema: Schema, candidate: Mapping[str, Any]) -> Result[Dict[str, Any]]:
    try:
        return Result.success(schema.validate(candidate))
    except ValidationError as exc:
        return Result.failure(exc)
