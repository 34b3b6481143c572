"""SQLAlchemy materialization of document storage tables.

The ``Table`` value object describes the storage layout of a document type
independently of any database driver. This module turns that description
into SQLAlchemy ``Table`` objects bound to a ``MetaData`` so the usual
SQLAlchemy tooling (``metadata.create_all``, Alembic autogenerate, DDL
compilation) can consume it.

Only PostgreSQL column types are supported since the payload column relies on
``jsonb``.
"""

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateTable
from sqlalchemy.types import TypeEngine

from docmap.models.schema import Table, TableColumn

_PG_TYPES: dict[str, TypeEngine] = {
    "uuid": postgresql.UUID(as_uuid=True),
    "jsonb": postgresql.JSONB(),
    "varchar": sa.String(),
    "integer": sa.Integer(),
    "bigint": sa.BigInteger(),
    "boolean": sa.Boolean(),
    "double precision": postgresql.DOUBLE_PRECISION(),
    "decimal": sa.Numeric(),
    "date": sa.Date(),
    "timestamp without time zone": postgresql.TIMESTAMP(timezone=False),
    "timestamp with time zone": postgresql.TIMESTAMP(timezone=True),
}


def sqlalchemy_type_for(pg_type: str) -> TypeEngine:
    """Return the SQLAlchemy type for a PostgreSQL type name."""
    try:
        return _PG_TYPES[pg_type.lower()]
    except KeyError:
        raise ValueError(f"unsupported column type '{pg_type}'") from None


def _to_column(column: TableColumn) -> sa.Column:
    server_default = sa.text(column.default) if column.default is not None else None
    return sa.Column(
        column.name,
        sqlalchemy_type_for(column.type),
        primary_key=column.primary_key,
        autoincrement=False,
        nullable=column.nullable and not column.primary_key,
        server_default=server_default,
    )


def build_sqlalchemy_table(table: Table, metadata: sa.MetaData | None = None) -> sa.Table:
    """Create a SQLAlchemy Table for the storage table.

    Args:
        table: Storage table derived from a document mapping.
        metadata: MetaData to register the table in. A fresh MetaData is used
            when omitted.

    Returns:
        SQLAlchemy Table in the table's schema, columns in storage order.
    """
    metadata = metadata if metadata is not None else sa.MetaData()
    existing = metadata.tables.get(table.qualified_name)
    if existing is not None:
        metadata.remove(existing)
    return sa.Table(
        table.name,
        metadata,
        *(_to_column(column) for column in table.columns),
        schema=table.schema_name,
    )


def create_table_ddl(table: Table) -> str:
    """Compile the CREATE TABLE statement for PostgreSQL."""
    statement = CreateTable(build_sqlalchemy_table(table))
    return str(statement.compile(dialect=postgresql.dialect())).strip()
