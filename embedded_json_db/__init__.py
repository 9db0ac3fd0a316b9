"""Embedded, file-backed JSON table store with schema-validated CRUD."""
import logging

from .database import Database
from .errors import (
    ConstructionError,
    DBError,
    DuplicateColumn,
    InvalidArgument,
    InvalidAttributeSpec,
    InvalidNumericValue,
    IOCorruptionError,
    MissingColumnName,
    MissingRequiredField,
    NullNotAllowed,
    ReservedField,
    SchemaError,
    StorageIOError,
    TableAlreadyExists,
    TableNotFound,
    TypeMismatch,
    UnknownColumn,
    UnserializableValue,
    ValidationError,
)
from .result import Result
from .schema import Attribute, Schema, validate
from .storage import FileStorage, PersistenceBackend
from .table import Record, Table

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Database",
    "Result",
    "Record",
    "Table",
    "Attribute",
    "Schema",
    "validate",
    "FileStorage",
    "PersistenceBackend",
    # Errors
    "DBError",
    "ConstructionError",
    "InvalidArgument",
    "TableNotFound",
    "TableAlreadyExists",
    "SchemaError",
    "MissingColumnName",
    "DuplicateColumn",
    "InvalidAttributeSpec",
    "ValidationError",
    "MissingRequiredField",
    "NullNotAllowed",
    "TypeMismatch",
    "InvalidNumericValue",
    "UnknownColumn",
    "ReservedField",
    "UnserializableValue",
    "StorageIOError",
    "IOCorruptionError",
]

__version__ = "0.1.0"
