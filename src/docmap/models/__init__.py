from docmap.models.enums import EnumStorage, TypeKind
from docmap.models.field import Field
from docmap.models.schema import Table, TableColumn, UpsertArgument, UpsertFunction

__all__ = [
    "Field",
    "Table",
    "TableColumn",
    "UpsertArgument",
    "UpsertFunction",
    "EnumStorage",
    "TypeKind",
]
