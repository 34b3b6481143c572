"""Document mapping: how one document type is laid out in PostgreSQL.

A ``DocumentMapping`` is created for a class, configured (subclasses,
duplicated fields, alias, optimistic concurrency) during application startup
and then only read. Every SQL object derived from it, the storage table and
the upsert function, is rebuilt from the current state on request so changes
made after construction are always visible.
"""

from typing import Any

import structlog
from pydantic import field_validator

from docmap.config import StoreOptions, get_store_options
from docmap.errors import DuplicateColumnNameError, InvalidDocumentError, InvalidSubclassError, UnknownMemberError
from docmap.markers import has_optimistic_concurrency
from docmap.models.base import ValueModel, ensure_identifier
from docmap.models.field import Field
from docmap.models.schema import Table, UpsertFunction
from docmap.models.tables import sqlalchemy_type_for
from docmap.services import naming
from docmap.services.columns import (
    BASE_DOCUMENT_TYPE,
    DATA_COLUMN,
    DOCUMENT_TYPE_COLUMN,
    ID_COLUMN,
    LAST_MODIFIED_COLUMN,
    PYTHON_TYPE_COLUMN,
    RESERVED_COLUMNS,
    VERSION_COLUMN,
)
from docmap.services.fields import DOCUMENT_ALIAS, FieldResolver, find_member
from docmap.services.introspection import Member, TypeShape, describe_type
from docmap.services.schema_objects import DocumentSchemaObjects, upsert_arg_name
from docmap.services.sql_types import pg_type_for

ID_TYPES = frozenset({"uuid", "integer", "bigint", "varchar"})


class SubClassMapping(ValueModel):
    """A registered runtime variant of a hierarchy root."""

    document_type: type
    alias: str

    @field_validator("alias", mode="before")
    @classmethod
    def _normalize_alias(cls, value: Any) -> str:
        return ensure_identifier(value, "alias")


def _ensure_alias(value: Any) -> str:
    """Validate an alias together with the object names derived from it."""
    alias = ensure_identifier(value, "alias")
    ensure_identifier(naming.table_name(alias), "table name")
    ensure_identifier(naming.upsert_name(alias), "upsert function name")
    return alias


def find_id_member(shape: TypeShape) -> Member:
    """Pick the member used as the primary key.

    A member named ``id`` in any casing wins, preferring the exact lowercase
    spelling. Otherwise the first member, in declaration order, whose
    snake_case name ends in ``_id`` (``UserId``, ``user_id``) is used.

    Raises:
        InvalidDocumentError: If no member qualifies.
    """
    members = list(shape.members.values())
    exact = [member for member in members if member.name.lower() == ID_COLUMN]
    if exact:
        return next((member for member in exact if member.name == ID_COLUMN), exact[0])
    for member in members:
        if naming.to_snake_case(member.name).endswith(f"_{ID_COLUMN}"):
            return member
    raise InvalidDocumentError(f"could not determine an id member for '{shape.name}'")


class DocumentMapping:
    """Storage configuration for a document type.

    Example:
        mapping = DocumentMapping.for_type(User)
        mapping.duplicate_field("FirstName")
        mapping.table.column_names
        # ['id', 'data', 'mt_last_modified', 'mt_version', 'mt_python_type', 'first_name']
    """

    ID_COLUMN = ID_COLUMN
    DATA_COLUMN = DATA_COLUMN
    LAST_MODIFIED_COLUMN = LAST_MODIFIED_COLUMN
    VERSION_COLUMN = VERSION_COLUMN
    PYTHON_TYPE_COLUMN = PYTHON_TYPE_COLUMN
    DOCUMENT_TYPE_COLUMN = DOCUMENT_TYPE_COLUMN
    BASE_DOCUMENT_TYPE = BASE_DOCUMENT_TYPE

    def __init__(
        self,
        document_type: type,
        schema_name: str | None = None,
        alias: str | None = None,
        id_member: str | None = None,
        options: StoreOptions | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._shape = describe_type(document_type)
        self._options = options or get_store_options()
        self._logger = logger or structlog.get_logger(__name__)

        self._schema_name = ensure_identifier(schema_name or self._options.database_schema_name, "schema_name")
        self._alias = _ensure_alias(alias or naming.alias_for(document_type))
        self._id_member = self._resolve_id_member(id_member)
        self._resolver = FieldResolver(
            shape=self._shape,
            id_member=self._id_member,
            enum_storage=self._options.enum_storage,
            logger=self._logger,
        )
        self._fields: dict[str, Field] = {}
        self._duplicated_fields: dict[str, Field] = {}
        self._subclasses: dict[type, SubClassMapping] = {}
        self.use_optimistic_concurrency = has_optimistic_concurrency(document_type)

        self._logger.debug(
            "mapping_created",
            document_type=self._shape.name,
            alias=self._alias,
            schema_name=self._schema_name,
            id_member=self._id_member.name,
        )

    @classmethod
    def for_type(cls, document_type: type, schema_name: str | None = None, **kwargs: Any) -> "DocumentMapping":
        return cls(document_type, schema_name, **kwargs)

    def __repr__(self) -> str:
        return f"DocumentMapping({self._shape.name}, table={self.qualified_table_name!r})"

    @property
    def document_type(self) -> type:
        return self._shape.document_type

    @property
    def shape(self) -> TypeShape:
        return self._shape

    @property
    def alias(self) -> str:
        return self._alias

    @alias.setter
    def alias(self, value: str) -> None:
        previous = self._alias
        self._alias = _ensure_alias(value)
        self._logger.debug("alias_changed", document_type=self._shape.name, previous=previous, alias=self._alias)

    @property
    def schema_name(self) -> str:
        return self._schema_name

    @schema_name.setter
    def schema_name(self, value: str) -> None:
        self._schema_name = ensure_identifier(value, "schema_name")

    @property
    def id_member(self) -> Member:
        return self._id_member

    @property
    def id_pg_type(self) -> str:
        return pg_type_for(self._id_member.annotation, self._options.enum_storage)

    @property
    def table_name(self) -> str:
        return naming.table_name(self._alias)

    @property
    def qualified_table_name(self) -> str:
        return naming.qualified_name(self._schema_name, self.table_name)

    @property
    def upsert_name(self) -> str:
        return naming.upsert_name(self._alias)

    @property
    def qualified_upsert_name(self) -> str:
        return naming.qualified_name(self._schema_name, self.upsert_name)

    @property
    def duplicated_fields(self) -> tuple[Field, ...]:
        return tuple(self._duplicated_fields.values())

    @property
    def subclasses(self) -> tuple[SubClassMapping, ...]:
        return tuple(self._subclasses.values())

    @property
    def schema_objects(self) -> DocumentSchemaObjects:
        return DocumentSchemaObjects(self)

    @property
    def table(self) -> Table:
        return self.schema_objects.storage_table()

    @property
    def upsert_function(self) -> UpsertFunction:
        return self.schema_objects.upsert_function()

    def is_hierarchy(self) -> bool:
        """Whether rows of this table can hold more than one runtime type."""
        if self._shape.is_abstract or self._shape.is_interface:
            return True
        return bool(self._subclasses)

    def select_fields(self) -> list[str]:
        """Columns selected, in order, when loading documents."""
        fields = [DATA_COLUMN, ID_COLUMN]
        if self.is_hierarchy():
            fields.append(DOCUMENT_TYPE_COLUMN)
        return fields

    def field_for(self, member_path: str) -> Field:
        """Return the field for a member path.

        Duplicated fields are located by their own column, everything else
        by the id column or a JSON extraction from the payload.

        Raises:
            UnknownMemberError: If the path does not exist on the type.
        """
        field = self._resolve(member_path)
        for duplicated in self._duplicated_fields.values():
            if duplicated.member_path == field.member_path:
                return duplicated
        return field

    def add_subclass(self, subclass: type, alias: str | None = None) -> SubClassMapping:
        """Register a runtime variant stored in this mapping's table.

        Adding a type that is already registered returns the existing
        registration unchanged.

        Raises:
            InvalidSubclassError: If ``subclass`` does not derive from the
                document type or its alias is taken by another subclass.
        """
        root = self.document_type
        if not isinstance(subclass, type) or subclass is root or root not in subclass.__mro__:
            raise InvalidSubclassError(f"{subclass!r} is not a subclass of '{root.__name__}'")

        existing = self._subclasses.get(subclass)
        if existing is not None:
            return existing

        mapping = SubClassMapping(document_type=subclass, alias=alias or naming.alias_for(subclass))
        for other in self._subclasses.values():
            if other.alias == mapping.alias:
                raise InvalidSubclassError(
                    f"alias '{mapping.alias}' is already used by '{other.document_type.__name__}'"
                )

        self._subclasses[subclass] = mapping
        self._logger.debug(
            "subclass_registered",
            document_type=self._shape.name,
            subclass=subclass.__name__,
            alias=mapping.alias,
        )
        return mapping

    def duplicate_field(self, member_path: str, column_name: str | None = None, pg_type: str | None = None) -> Field:
        """Promote a member from the JSON payload into its own column.

        Args:
            member_path: Dot separated member path, e.g. ``"FirstName"``.
            column_name: Column to use instead of the snake_cased member name.
            pg_type: Column type to use instead of the inferred one.

        Returns:
            The duplicated field.

        Raises:
            UnknownMemberError: If the path does not exist on the type.
            ValueError: If ``pg_type`` is not a supported column type, or the
                column or its upsert argument is not a valid SQL identifier.
            DuplicateColumnNameError: If the column is reserved or already
                used by another duplicated field.
        """
        source = self._resolve(member_path)
        if pg_type is not None:
            sqlalchemy_type_for(pg_type)
        column = ensure_identifier(column_name, "column_name") if column_name else source.column_name
        ensure_identifier(upsert_arg_name(column), "upsert argument")
        if column in RESERVED_COLUMNS or column in self._duplicated_fields:
            raise DuplicateColumnNameError(column, self.qualified_table_name)

        field = source.model_copy(
            update={
                "column_name": column,
                "sql_locator": f"{DOCUMENT_ALIAS}.{column}",
                "pg_type": pg_type or source.pg_type,
                "is_id": False,
                "is_duplicated": True,
            }
        )
        self._duplicated_fields[column] = field
        self._logger.debug(
            "field_duplicated",
            document_type=self._shape.name,
            member_path=field.dotted_path,
            column_name=column,
            pg_type=field.pg_type,
        )
        return field

    def alias_for_type(self, document_type: type) -> str:
        """Discriminator value stored for rows of ``document_type``."""
        if document_type is self.document_type:
            return BASE_DOCUMENT_TYPE
        subclass = self._subclasses.get(document_type)
        if subclass is None:
            raise InvalidSubclassError(f"'{document_type.__name__}' is not registered on '{self._shape.name}'")
        return subclass.alias

    def type_for_alias(self, alias: str) -> type:
        """Runtime type for a stored discriminator value."""
        if alias == BASE_DOCUMENT_TYPE:
            return self.document_type
        lowered = alias.lower()
        for subclass in self._subclasses.values():
            if subclass.alias == lowered:
                return subclass.document_type
        raise InvalidSubclassError(f"no subclass with alias '{alias}' on '{self._shape.name}'")

    def _resolve(self, member_path: str) -> Field:
        field = self._fields.get(member_path)
        if field is None:
            field = self._resolver.resolve(member_path)
            self._fields[member_path] = field
        return field

    def _resolve_id_member(self, id_member: str | None) -> Member:
        if id_member is None:
            member = find_id_member(self._shape)
        else:
            member = find_member(self._shape, id_member)
            if member is None:
                raise UnknownMemberError(self.document_type, id_member)

        pg_type = pg_type_for(member.annotation, self._options.enum_storage)
        if pg_type not in ID_TYPES:
            raise InvalidDocumentError(
                f"id member '{member.name}' of '{self._shape.name}' has unsupported type {member.annotation!r}; "
                "annotate it as UUID, int or str"
            )
        return member
