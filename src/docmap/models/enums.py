from enum import StrEnum


class TypeKind(StrEnum):
    CONCRETE = "concrete"
    ABSTRACT = "abstract"
    INTERFACE = "interface"


class EnumStorage(StrEnum):
    AS_INTEGER = "integer"
    AS_STRING = "string"
