"""Naming conventions for document storage objects.

Every derived name is lowercase and every SQL object name is schema
qualified, including objects in the default schema.
"""

import re

TABLE_PREFIX = "mt_doc_"
UPSERT_PREFIX = "mt_upsert_"

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")


def alias_for(document_type: type) -> str:
    """Default alias for a document type.

    Classes nested in other classes keep their enclosing class names so
    ``Outer.Inner`` becomes ``outer_inner``. Function-local scopes are not
    part of the alias.
    """
    qualname = getattr(document_type, "__qualname__", document_type.__name__)
    segments = qualname.split(".")
    if "<locals>" in segments:
        segments = segments[len(segments) - segments[::-1].index("<locals>") :]
    return "_".join(segments).lower()


def table_name(alias: str) -> str:
    return f"{TABLE_PREFIX}{alias.lower()}"


def upsert_name(alias: str) -> str:
    return f"{UPSERT_PREFIX}{alias.lower()}"


def qualified_name(schema_name: str, local_name: str) -> str:
    return f"{schema_name.lower()}.{local_name}"


def to_snake_case(name: str) -> str:
    """Convert a PascalCase or camelCase member name to snake_case.

    ``FirstName`` and ``firstName`` both become ``first_name``, acronyms are
    kept together (``HTTPCode`` -> ``http_code``) and names that are already
    snake_case pass through unchanged.
    """
    name = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    name = _WORD_BOUNDARY.sub(r"\1_\2", name)
    return name.lower()
