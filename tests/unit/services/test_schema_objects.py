"""Unit tests for the storage table and upsert function builders."""

from abc import ABC
from dataclasses import dataclass, field
from uuid import UUID, uuid4

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from docmap.services.mapping import DocumentMapping
from docmap.services.schema_objects import DocumentSchemaObjects


@dataclass
class User:
    id: UUID = field(default_factory=uuid4)
    first_name: str = ""
    last_name: str = ""
    age: int = 0


@dataclass
class SuperUser(User):
    role: str = ""


@dataclass
class IntDoc:
    id: int = 0


@dataclass
class Squad:
    id: str = ""


@dataclass
class BaseballTeam(Squad):
    mascot: str = ""


class AbstractDoc(ABC):
    id: int


BASE_COLUMNS = ["id", "data", "mt_last_modified", "mt_version", "mt_python_type"]


def _schema_objects(document_type: type, schema_name: str | None = None) -> DocumentSchemaObjects:
    return DocumentSchemaObjects(DocumentMapping.for_type(document_type, schema_name))


class TestStorageTable:
    """Tests for storage_table."""

    def test_to_table_without_subclasses_and_no_duplicated_fields(self) -> None:
        table = _schema_objects(IntDoc).storage_table()

        assert table.column_names == BASE_COLUMNS
        assert [column.position for column in table.columns] == [0, 1, 2, 3, 4]

    def test_id_column_type_follows_id_member(self) -> None:
        assert _schema_objects(IntDoc).storage_table().column("id").type == "integer"
        assert _schema_objects(User).storage_table().column("id").type == "uuid"
        assert _schema_objects(Squad).storage_table().column("id").type == "varchar"

    def test_system_column_types(self) -> None:
        table = _schema_objects(User).storage_table()

        assert table.column("data").type == "jsonb"
        assert table.column("mt_last_modified").type == "timestamp with time zone"
        assert table.column("mt_version").type == "uuid"
        assert table.column("mt_version").nullable is False
        assert table.column("mt_python_type").type == "varchar"

    def test_primary_key(self) -> None:
        table = _schema_objects(User).storage_table()

        assert table.primary_key is not None
        assert table.primary_key.name == "id"

    def test_to_table_columns_with_subclasses(self) -> None:
        mapping = DocumentMapping.for_type(Squad)
        mapping.add_subclass(BaseballTeam)

        table = mapping.schema_objects.storage_table()
        type_column = table.columns[-1]

        assert table.column_names == [*BASE_COLUMNS, "mt_doc_type"]
        assert type_column.name == DocumentMapping.DOCUMENT_TYPE_COLUMN
        assert type_column.type == "varchar"
        assert type_column.default == "'BASE'"

    def test_abstract_type_table_has_discriminator(self) -> None:
        assert _schema_objects(AbstractDoc).storage_table().column_names[-1] == "mt_doc_type"

    def test_duplicated_fields_precede_discriminator(self) -> None:
        mapping = DocumentMapping.for_type(User)
        mapping.duplicate_field("LastName")
        mapping.add_subclass(SuperUser)

        assert mapping.table.column_names == [*BASE_COLUMNS, "last_name", "mt_doc_type"]

    def test_table_reflects_mutations_after_first_build(self) -> None:
        mapping = DocumentMapping.for_type(User)
        schema_objects = mapping.schema_objects
        before = schema_objects.storage_table()

        mapping.alias = "Members"
        mapping.duplicate_field("Age")
        after = schema_objects.storage_table()

        assert before.name == "mt_doc_user"
        assert before.column_names == BASE_COLUMNS
        assert after.name == "mt_doc_members"
        assert after.column_names == [*BASE_COLUMNS, "age"]
        assert after.column("age").type == "integer"

    def test_schema_name(self) -> None:
        table = _schema_objects(User, "Other").storage_table()

        assert table.schema_name == "other"
        assert table.qualified_name == "other.mt_doc_user"


class TestUpsertFunction:
    """Tests for upsert_function."""

    def test_baseline_arguments(self) -> None:
        function = _schema_objects(Squad).upsert_function()

        assert function.columns == ["id", "data", "mt_version", "mt_python_type"]
        assert [argument.arg for argument in function.arguments] == ["doc_id", "doc", "doc_version", "doc_python_type"]

    def test_duplicated_field_arguments(self) -> None:
        mapping = DocumentMapping.for_type(User)
        mapping.duplicate_field("FirstName")
        mapping.duplicate_field("LastName")

        function = mapping.schema_objects.upsert_function()

        assert function.columns == ["id", "data", "first_name", "last_name", "mt_version", "mt_python_type"]
        assert function.arguments[2].arg == "arg_first_name"
        assert function.arguments[2].member_path == ("first_name",)

    def test_hierarchy_discriminator_is_last(self) -> None:
        mapping = DocumentMapping.for_type(Squad)
        mapping.add_subclass(BaseballTeam)

        function = mapping.schema_objects.upsert_function()

        assert function.columns == ["id", "data", "mt_version", "mt_python_type", "mt_doc_type"]
        assert function.arguments[-1].arg == "doc_type"

    def test_write_order_differs_from_table_order(self) -> None:
        mapping = DocumentMapping.for_type(User)
        mapping.duplicate_field("FirstName")

        table_columns = mapping.table.column_names
        argument_columns = mapping.upsert_function.columns

        assert table_columns.index("first_name") > table_columns.index("mt_version")
        assert argument_columns.index("first_name") < argument_columns.index("mt_version")

    def test_signature(self) -> None:
        mapping = DocumentMapping.for_type(User)
        mapping.duplicate_field("Age")

        assert mapping.upsert_function.signature() == (
            "public.mt_upsert_user(doc_id uuid, doc jsonb, arg_age integer, doc_version uuid, doc_python_type varchar)"
        )


class TestMaterialization:
    """Tests for SQLAlchemy materialization through the builder."""

    def test_to_sqlalchemy(self) -> None:
        metadata = sa.MetaData()

        table = _schema_objects(User).to_sqlalchemy(metadata)

        assert table.schema == "public"
        assert list(table.c.keys()) == BASE_COLUMNS
        assert "public.mt_doc_user" in metadata.tables
        assert isinstance(table.c.data.type, postgresql.JSONB)

    def test_create_table_ddl(self) -> None:
        mapping = DocumentMapping.for_type(IntDoc)

        ddl = mapping.schema_objects.create_table_ddl()

        assert ddl.startswith("CREATE TABLE public.mt_doc_intdoc")
        assert "id INTEGER NOT NULL" in ddl
        assert "SERIAL" not in ddl
        assert "data JSONB NOT NULL" in ddl
        assert "mt_last_modified TIMESTAMP WITH TIME ZONE DEFAULT transaction_timestamp()" in ddl
        assert "PRIMARY KEY (id)" in ddl
