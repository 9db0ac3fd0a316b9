from __future__ import annotations
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

from .errors import InvalidArgument

Predicate = Callable[[Mapping[str, Any]], Any]


def match_all(record: Mapping[str, Any]) -> bool:
    return True


def ensure_predicate(predicate: Optional[Predicate], argument: str = "predicate") -> Predicate:
    """
    None means "every record". Anything else has to be callable; predicates
    are plain functions over a record, there is no query syntax.
    """
    if predicate is None:
        return match_all
    if not callable(predicate):
        raise InvalidArgument(f"Argument {argument}: {type(predicate).__name__} is not callable.")
    return predicate


def readonly(record: Mapping[str, Any]) -> Mapping[str, Any]:
    # Predicates see the stored record without copying it, but cannot assign keys
    return MappingProxyType(record)  # type: ignore[arg-type]
