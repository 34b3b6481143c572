"""PostgreSQL column types for Python member annotations."""

import typing
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from docmap.models.enums import EnumStorage
from docmap.services.introspection import unwrap_optional

JSONB = "jsonb"
VARCHAR = "varchar"

# Order matters: bool is a subclass of int and datetime of date.
_SCALAR_TYPES: tuple[tuple[type, str], ...] = (
    (bool, "boolean"),
    (int, "integer"),
    (float, "double precision"),
    (Decimal, "decimal"),
    (UUID, "uuid"),
    (datetime, "timestamp without time zone"),
    (date, "date"),
    (str, VARCHAR),
)


def pg_type_for(annotation: Any, enum_storage: EnumStorage = EnumStorage.AS_INTEGER) -> str:
    """Return the PostgreSQL type used to store a member with this annotation."""
    annotation = unwrap_optional(annotation)
    if typing.get_origin(annotation) is not None or not isinstance(annotation, type):
        return JSONB
    if issubclass(annotation, Enum):
        if issubclass(annotation, str) or enum_storage == EnumStorage.AS_STRING:
            return VARCHAR
        return "integer"
    for python_type, pg_type in _SCALAR_TYPES:
        if issubclass(annotation, python_type):
            return pg_type
    return JSONB
