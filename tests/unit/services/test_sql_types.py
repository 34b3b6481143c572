"""Unit tests for PostgreSQL type inference."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum, IntEnum, StrEnum
from typing import Any, Optional
from uuid import UUID

import pytest

from docmap.models.enums import EnumStorage
from docmap.services.sql_types import pg_type_for


class Color(Enum):
    RED = 1
    BLUE = 2


class Priority(IntEnum):
    LOW = 1
    HIGH = 2


class Status(StrEnum):
    OPEN = "open"
    CLOSED = "closed"


@pytest.mark.parametrize(
    ("annotation", "expected"),
    [
        (str, "varchar"),
        (int, "integer"),
        (bool, "boolean"),
        (float, "double precision"),
        (Decimal, "decimal"),
        (UUID, "uuid"),
        (datetime, "timestamp without time zone"),
        (date, "date"),
        (Optional[int], "integer"),
        (str | None, "varchar"),
        (list[str], "jsonb"),
        (dict[str, Any], "jsonb"),
        (Any, "jsonb"),
        ("str", "jsonb"),
    ],
)
def test_pg_type_for(annotation: Any, expected: str) -> None:
    assert pg_type_for(annotation) == expected


def test_enums_default_to_integer_storage() -> None:
    assert pg_type_for(Color) == "integer"
    assert pg_type_for(Priority) == "integer"


def test_enums_as_string_storage() -> None:
    assert pg_type_for(Color, EnumStorage.AS_STRING) == "varchar"


def test_string_enums_are_always_varchar() -> None:
    assert pg_type_for(Status) == "varchar"
    assert pg_type_for(Status, EnumStorage.AS_INTEGER) == "varchar"
