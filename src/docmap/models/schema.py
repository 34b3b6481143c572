"""Value objects describing the SQL objects that store a document type.

Both are rebuilt from the current mapping state every time they are
requested, so they never outlive the configuration they were derived from.
"""

from typing import Any

from pydantic import Field, ValidationInfo, field_validator, model_validator

from docmap.models.base import ValueModel, ensure_identifier, ensure_non_empty_text


def _qualify(schema_name: str, name: str) -> str:
    return f"{schema_name}.{name}"


class TableColumn(ValueModel):
    name: str
    type: str
    position: int = Field(ge=0)
    nullable: bool = True
    primary_key: bool = False
    default: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _normalize_name(cls, value: Any) -> str:
        return ensure_identifier(value, "name")

    @field_validator("type")
    @classmethod
    def _ensure_type(cls, value: str) -> str:
        return ensure_non_empty_text(value, "type")


class Table(ValueModel):
    schema_name: str
    name: str
    columns: list[TableColumn] = Field(default_factory=list)

    @field_validator("schema_name", "name", mode="before")
    @classmethod
    def _normalize_names(cls, value: Any, info: ValidationInfo) -> str:
        return ensure_identifier(value, info.field_name or "name")

    @model_validator(mode="after")
    def _validate_columns(self) -> "Table":
        names = [column.name for column in self.columns]
        if len(names) != len(set(names)):
            raise ValueError(f"duplicate column names in table '{self.name}'")
        if [column.position for column in self.columns] != list(range(len(self.columns))):
            raise ValueError("column positions must be contiguous and ordered")
        return self

    @property
    def qualified_name(self) -> str:
        return _qualify(self.schema_name, self.name)

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self.columns]

    @property
    def primary_key(self) -> TableColumn | None:
        return next((column for column in self.columns if column.primary_key), None)

    def column(self, name: str) -> TableColumn | None:
        lowered = name.lower()
        return next((column for column in self.columns if column.name == lowered), None)

    def has_column(self, name: str) -> bool:
        return self.column(name) is not None


class UpsertArgument(ValueModel):
    arg: str
    column: str
    sql_type: str
    member_path: tuple[str, ...] | None = None

    @field_validator("arg", "column", mode="before")
    @classmethod
    def _normalize_names(cls, value: Any, info: ValidationInfo) -> str:
        return ensure_identifier(value, info.field_name or "name")

    def to_sql(self) -> str:
        return f"{self.arg} {self.sql_type}"


class UpsertFunction(ValueModel):
    """Signature of the generated insert-or-update routine.

    Arguments are positional: the write path binds parameters in exactly
    this order.
    """

    schema_name: str
    name: str
    arguments: list[UpsertArgument] = Field(default_factory=list)

    @field_validator("schema_name", "name", mode="before")
    @classmethod
    def _normalize_names(cls, value: Any, info: ValidationInfo) -> str:
        return ensure_identifier(value, info.field_name or "name")

    @property
    def qualified_name(self) -> str:
        return _qualify(self.schema_name, self.name)

    @property
    def columns(self) -> list[str]:
        return [argument.column for argument in self.arguments]

    def signature(self) -> str:
        args = ", ".join(argument.to_sql() for argument in self.arguments)
        return f"{self.qualified_name}({args})"


__all__ = ["Table", "TableColumn", "UpsertArgument", "UpsertFunction"]
