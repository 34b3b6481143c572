from typing import Any

from pydantic import ConfigDict, Field as PydanticField, ValidationInfo, field_validator

from docmap.models.base import ValueModel, ensure_identifier, ensure_non_empty_text


class Field(ValueModel):
    """A member of a document type projected onto SQL.

    ``sql_locator`` is the expression used to reach the member from a query
    aliased as ``d``: a real column for the id and duplicated fields, a JSON
    extraction from the payload otherwise.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    member_path: tuple[str, ...] = PydanticField(min_length=1)
    column_name: str
    sql_locator: str
    member_type: Any = None
    pg_type: str = "jsonb"
    is_id: bool = False
    is_duplicated: bool = False

    @field_validator("column_name", mode="before")
    @classmethod
    def _normalize_column_name(cls, value: Any) -> str:
        return ensure_identifier(value, "column_name")

    @field_validator("sql_locator", "pg_type")
    @classmethod
    def _ensure_text(cls, value: str, info: ValidationInfo) -> str:
        return ensure_non_empty_text(value, info.field_name or "value")

    @property
    def member_name(self) -> str:
        return self.member_path[-1]

    @property
    def dotted_path(self) -> str:
        return ".".join(self.member_path)


__all__ = ["Field"]
