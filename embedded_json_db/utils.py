from __future__ import annotations
import json
import math
from typing import Any, Dict


def empty_document() -> Dict[str, Any]:
    return {"tables": []}


def dump_document(doc: Dict[str, Any], indent: int | None = 2) -> str:
    return json.dumps(doc, indent=indent, ensure_ascii=False, allow_nan=False)


def is_bad_number(value: Any) -> bool:
    """True for float NaN and infinities, which JSON cannot carry."""
    return isinstance(value, float) and not math.isfinite(value)


def is_json_value(value: Any) -> bool:
    if value is None or isinstance(value, (str, bool, int)):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, (list, tuple)):
        return all(is_json_value(v) for v in value)
    if isinstance(value, dict):
        return all(isinstance(k, str) and is_json_value(v) for k, v in value.items())
    return False


def type_name(value: Any) -> str:
    """Name of the attribute type a Python value would satisfy."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (dict, list, tuple)):
        return "object"
    return type(value).__name__


def json_copy(value: Any) -> Any:
    """Deep copy of a JSON value; tuples become lists as they would on disk."""
    if isinstance(value, dict):
        return {k: json_copy(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_copy(v) for v in value]
    return value
