from __future__ import annotations
from typing import Any


class DBError(Exception):
    """Base class for every error the database reports."""
    code = "db_error"


class ConstructionError(DBError):
    code = "construction_error"


class InvalidArgument(DBError):
    code = "invalid_argument"


class TableNotFound(DBError):
    code = "table_not_found"

    def __init__(self, table: str) -> None:
        super().__init__(f'The table "{table}" does not exist.')
        self.table = table


class TableAlreadyExists(DBError):
    code = "table_already_exists"

    def __init__(self, table: str) -> None:
        super().__init__(f'The table "{table}" already exists.')
        self.table = table


# ----- Schema declaration -----

class SchemaError(DBError):
    code = "schema_error"


class MissingColumnName(SchemaError):
    code = "missing_column_name"

    def __init__(self, position: int) -> None:
        super().__init__(f"Attribute #{position}: a non-empty string name must be specified.")
        self.position = position


class DuplicateColumn(SchemaError):
    code = "duplicate_column"

    def __init__(self, column: str) -> None:
        super().__init__(f'Two columns cannot have the same name: "{column}".')
        self.column = column


class InvalidAttributeSpec(SchemaError):
    code = "invalid_attribute_spec"


# ----- Record validation -----

class ValidationError(DBError):
    """Raised when a candidate record or patch breaks the table schema."""
    code = "validation_error"

    def __init__(self, attribute: str, message: str) -> None:
        super().__init__(message)
        self.attribute = attribute


class MissingRequiredField(ValidationError):
    code = "missing_required_field"

    def __init__(self, attribute: str) -> None:
        super().__init__(attribute, f"The value of {attribute} is not specified.")


class NullNotAllowed(ValidationError):
    code = "null_not_allowed"

    def __init__(self, attribute: str) -> None:
        super().__init__(attribute, f"The value of {attribute} cannot be null.")


class TypeMismatch(ValidationError):
    code = "type_mismatch"

    def __init__(self, attribute: str, expected: str, actual: str) -> None:
        super().__init__(attribute, f"The value of {attribute} is not {expected} (got {actual}).")
        self.expected = expected
        self.actual = actual


class InvalidNumericValue(ValidationError):
    code = "invalid_numeric_value"

    def __init__(self, attribute: str, value: Any = None) -> None:
        super().__init__(attribute, f"The value of {attribute} is not a finite number ({value!r}).")


class UnknownColumn(ValidationError):
    code = "unknown_column"

    def __init__(self, attribute: str) -> None:
        super().__init__(attribute, f'The column "{attribute}" is not declared in the table schema.')


class ReservedField(ValidationError):
    code = "reserved_field"

    def __init__(self, attribute: str) -> None:
        super().__init__(attribute, f'The field "{attribute}" is assigned by the database.')


class UnserializableValue(ValidationError):
    code = "unserializable_value"

    def __init__(self, attribute: str) -> None:
        super().__init__(attribute, f"The value of {attribute} cannot be stored as JSON.")


# ----- Persistence -----

class StorageIOError(DBError):
    code = "io_error"


class IOCorruptionError(DBError):
    code = "io_corruption"
