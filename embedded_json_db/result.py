from __future__ import annotations
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from .errors import DBError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of a public Database operation: either a value or the error that
    stopped it. Expected failures never raise; call unwrap() to get the value
    or have the carried error raised.
    """
    value: Optional[T] = None
    error: Optional[DBError] = None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: DBError) -> "Result[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str:
        return "Success." if self.error is None else str(self.error)

    def __bool__(self) -> bool:
        return self.ok

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
