import re
from typing import Any

from pydantic import BaseModel, ConfigDict

_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_]*$")
# PostgreSQL truncates identifiers longer than NAMEDATALEN - 1.
MAX_IDENTIFIER_LENGTH = 63


class ValueModel(BaseModel):
    """Base class for immutable value objects derived from a mapping."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


def ensure_identifier(value: Any, field_name: str) -> str:
    """Lowercase and validate a SQL identifier."""
    if not isinstance(value, str):
        raise TypeError(f"{field_name} must be a string")
    identifier = value.strip().lower()
    if not identifier:
        raise ValueError(f"{field_name} cannot be empty")
    if not identifier.isascii() or not _IDENTIFIER.match(identifier):
        raise ValueError(f"{field_name} '{value}' is not a valid SQL identifier")
    if len(identifier) > MAX_IDENTIFIER_LENGTH:
        raise ValueError(f"{field_name} '{value}' exceeds {MAX_IDENTIFIER_LENGTH} characters")
    return identifier


def ensure_non_empty_text(value: str, field_name: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{field_name} must be a string")
    if not value.strip():
        raise ValueError(f"{field_name} cannot be empty")
    return value
