"""Builders for the SQL objects that store a document type."""

from typing import TYPE_CHECKING

import sqlalchemy as sa

from docmap.models.schema import Table, TableColumn, UpsertArgument, UpsertFunction
from docmap.models.tables import build_sqlalchemy_table, create_table_ddl
from docmap.services.columns import (
    BASE_DOCUMENT_TYPE,
    DATA_COLUMN,
    DOCUMENT_TYPE_COLUMN,
    ID_COLUMN,
    LAST_MODIFIED_COLUMN,
    PYTHON_TYPE_COLUMN,
    VERSION_COLUMN,
)
from docmap.services.sql_types import JSONB, VARCHAR

if TYPE_CHECKING:
    from docmap.services.mapping import DocumentMapping

LAST_MODIFIED_DEFAULT = "transaction_timestamp()"
VERSION_DEFAULT = "(md5(random()::text || clock_timestamp()::text)::uuid)"
UPSERT_ARG_PREFIX = "arg_"


def upsert_arg_name(column_name: str) -> str:
    return f"{UPSERT_ARG_PREFIX}{column_name}"


class DocumentSchemaObjects:
    """Derives the storage table and upsert function from a mapping.

    Nothing is cached: each call reads the mapping's current alias, schema,
    duplicated fields and subclasses.
    """

    def __init__(self, mapping: "DocumentMapping") -> None:
        self._mapping = mapping

    def storage_table(self) -> Table:
        """Build the storage table.

        Column order is the id, the payload, the system columns
        (last modified, version, Python type), duplicated fields in
        registration order and, for hierarchies only, the document type
        discriminator as the last column.
        """
        mapping = self._mapping
        columns: list[dict] = [
            {"name": ID_COLUMN, "type": mapping.id_pg_type, "nullable": False, "primary_key": True},
            {"name": DATA_COLUMN, "type": JSONB, "nullable": False},
            {"name": LAST_MODIFIED_COLUMN, "type": "timestamp with time zone", "default": LAST_MODIFIED_DEFAULT},
            {"name": VERSION_COLUMN, "type": "uuid", "nullable": False, "default": VERSION_DEFAULT},
            {"name": PYTHON_TYPE_COLUMN, "type": VARCHAR},
        ]
        columns.extend({"name": field.column_name, "type": field.pg_type} for field in mapping.duplicated_fields)
        if mapping.is_hierarchy():
            columns.append({"name": DOCUMENT_TYPE_COLUMN, "type": VARCHAR, "default": f"'{BASE_DOCUMENT_TYPE}'"})

        return Table(
            schema_name=mapping.schema_name,
            name=mapping.table_name,
            columns=[TableColumn(position=position, **column) for position, column in enumerate(columns)],
        )

    def upsert_function(self) -> UpsertFunction:
        """Build the upsert function signature.

        Arguments follow write order: id, payload, duplicated fields in
        registration order, version, Python type and, for hierarchies only,
        the document type discriminator last.
        """
        mapping = self._mapping
        arguments = [
            UpsertArgument(arg="doc_id", column=ID_COLUMN, sql_type=mapping.id_pg_type),
            UpsertArgument(arg="doc", column=DATA_COLUMN, sql_type=JSONB),
        ]
        arguments.extend(
            UpsertArgument(
                arg=upsert_arg_name(field.column_name),
                column=field.column_name,
                sql_type=field.pg_type,
                member_path=field.member_path,
            )
            for field in mapping.duplicated_fields
        )
        arguments.append(UpsertArgument(arg="doc_version", column=VERSION_COLUMN, sql_type="uuid"))
        arguments.append(UpsertArgument(arg="doc_python_type", column=PYTHON_TYPE_COLUMN, sql_type=VARCHAR))
        if mapping.is_hierarchy():
            arguments.append(UpsertArgument(arg="doc_type", column=DOCUMENT_TYPE_COLUMN, sql_type=VARCHAR))

        return UpsertFunction(schema_name=mapping.schema_name, name=mapping.upsert_name, arguments=arguments)

    def to_sqlalchemy(self, metadata: sa.MetaData | None = None) -> sa.Table:
        return build_sqlalchemy_table(self.storage_table(), metadata)

    def create_table_ddl(self) -> str:
        return create_table_ddl(self.storage_table())
