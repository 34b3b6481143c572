"""Resolution of member paths into SQL field locators."""

import structlog

from docmap.errors import UnknownMemberError
from docmap.models.enums import EnumStorage
from docmap.models.field import Field
from docmap.services.columns import DATA_COLUMN, ID_COLUMN
from docmap.services.introspection import Member, TypeShape, describe_type, nested_type
from docmap.services.naming import to_snake_case
from docmap.services.sql_types import JSONB, VARCHAR, pg_type_for

DOCUMENT_ALIAS = "d"


def find_member(shape: TypeShape, name: str) -> Member | None:
    """Find a member by name.

    Tries an exact match, then a case-insensitive match, then snake_case
    equivalence so ``FirstName`` finds a ``first_name`` attribute. The first
    member in declaration order wins at each step.
    """
    if name in shape.members:
        return shape.members[name]
    lowered = name.lower()
    for member in shape.members.values():
        if member.name.lower() == lowered:
            return member
    snake = to_snake_case(name)
    for member in shape.members.values():
        if to_snake_case(member.name) == snake:
            return member
    return None


def json_locator(keys: list[str], pg_type: str) -> str:
    """Build a JSON extraction expression against the payload column."""
    prefix = f"{DOCUMENT_ALIAS}.{DATA_COLUMN}"
    parents = "".join(f" -> '{key}'" for key in keys[:-1])
    if pg_type == JSONB:
        return f"{prefix}{parents} -> '{keys[-1]}'"
    text = f"{prefix}{parents} ->> '{keys[-1]}'"
    if pg_type == VARCHAR:
        return text
    return f"CAST({text} as {pg_type})"


class FieldResolver:
    """Resolves member paths against a document type.

    Paths are dot separated member names from the document root, for example
    ``"FirstName"`` or ``"Address.City"``.
    """

    def __init__(
        self,
        shape: TypeShape,
        id_member: Member,
        enum_storage: EnumStorage = EnumStorage.AS_INTEGER,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._shape = shape
        self._id_member = id_member
        self._enum_storage = enum_storage
        self._logger = logger or structlog.get_logger(__name__)

    def resolve_members(self, member_path: str) -> list[Member]:
        """Resolve each segment of a path to its member.

        Raises:
            UnknownMemberError: If any segment does not exist on the type it
                is resolved against.
        """
        segments = [segment.strip() for segment in member_path.split(".")]
        members: list[Member] = []
        shape: TypeShape | None = self._shape
        for segment in segments:
            member = find_member(shape, segment) if shape is not None and segment else None
            if member is None:
                raise UnknownMemberError(self._shape.document_type, member_path, segment)
            members.append(member)
            child = nested_type(member)
            shape = describe_type(child) if child is not None else None
        return members

    def resolve(self, member_path: str) -> Field:
        members = self.resolve_members(member_path)
        names = tuple(member.name for member in members)
        leaf = members[-1]

        if len(members) == 1 and leaf.name == self._id_member.name:
            return Field(
                member_path=names,
                column_name=ID_COLUMN,
                sql_locator=f"{DOCUMENT_ALIAS}.{ID_COLUMN}",
                member_type=leaf.annotation,
                pg_type=pg_type_for(leaf.annotation, self._enum_storage),
                is_id=True,
            )

        pg_type = pg_type_for(leaf.annotation, self._enum_storage)
        keys = [to_snake_case(name) for name in names]
        field = Field(
            member_path=names,
            column_name=keys[-1],
            sql_locator=json_locator(keys, pg_type),
            member_type=leaf.annotation,
            pg_type=pg_type,
        )
        self._logger.debug("field_resolved", member_path=member_path, locator=field.sql_locator)
        return field
