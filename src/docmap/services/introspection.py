"""Type-shape introspection for document types.

Builds an ordered member registry for a class once, so member lookups during
mapping configuration never walk the class hierarchy again.
"""

import abc
import inspect
import types
import typing
from functools import lru_cache
from typing import Any, ClassVar

from pydantic import ConfigDict, Field

from docmap.errors import InvalidDocumentError
from docmap.models.base import ValueModel
from docmap.models.enums import TypeKind

_SKIPPED_MODULES = ("builtins", "typing", "abc")
_SKIPPED_PACKAGES = ("pydantic", "pydantic_core")


class Member(ValueModel):
    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    name: str
    annotation: Any = None
    declared_on: type
    is_property: bool = False


class TypeShape(ValueModel):
    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    document_type: type
    kind: TypeKind
    members: dict[str, Member] = Field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.document_type.__name__

    @property
    def is_abstract(self) -> bool:
        return self.kind == TypeKind.ABSTRACT

    @property
    def is_interface(self) -> bool:
        return self.kind == TypeKind.INTERFACE

    @property
    def member_names(self) -> list[str]:
        return list(self.members)


def unwrap_optional(annotation: Any) -> Any:
    """Strip ``None`` from ``Optional[X]`` and ``X | None`` annotations."""
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _is_class_var(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.startswith(("ClassVar", "typing.ClassVar"))
    return annotation is ClassVar or typing.get_origin(annotation) is ClassVar


def _is_inspectable(klass: type) -> bool:
    if klass is object or klass.__module__ in _SKIPPED_MODULES:
        return False
    return klass.__module__.split(".")[0] not in _SKIPPED_PACKAGES


def _own_annotations(obj: Any) -> dict[str, Any]:
    try:
        return inspect.get_annotations(obj, eval_str=True)
    except (NameError, TypeError, SyntaxError):
        # Unresolvable forward references are kept as their string form.
        return inspect.get_annotations(obj)


def _kind_of(document_type: type) -> TypeKind:
    if getattr(document_type, "_is_protocol", False):
        return TypeKind.INTERFACE
    if inspect.isabstract(document_type) or abc.ABC in document_type.__bases__:
        return TypeKind.ABSTRACT
    return TypeKind.CONCRETE


def _collect_members(document_type: type) -> dict[str, Member]:
    members: dict[str, Member] = {}
    hierarchy = [klass for klass in reversed(document_type.__mro__) if _is_inspectable(klass)]

    for klass in hierarchy:
        for name, annotation in _own_annotations(klass).items():
            if name.startswith("_") or _is_class_var(annotation):
                continue
            members[name] = Member(name=name, annotation=annotation, declared_on=klass)

    for klass in hierarchy:
        for name, attribute in vars(klass).items():
            if name.startswith("_") or name in members or not isinstance(attribute, property):
                continue
            returns = _own_annotations(attribute.fget).get("return", Any) if attribute.fget else Any
            members[name] = Member(name=name, annotation=returns, declared_on=klass, is_property=True)

    return members


@lru_cache(maxsize=None)
def describe_type(document_type: type) -> TypeShape:
    """Describe the shape of a document type.

    Args:
        document_type: Class to inspect.

    Returns:
        TypeShape with the type's kind and its public members, base class
        members first, in declaration order.

    Raises:
        InvalidDocumentError: If ``document_type`` is not a class.
    """
    if not isinstance(document_type, type):
        raise InvalidDocumentError(f"document type must be a class, got {document_type!r}")
    return TypeShape(
        document_type=document_type,
        kind=_kind_of(document_type),
        members=_collect_members(document_type),
    )


def nested_type(member: Member) -> type | None:
    """Return the class to resolve further path segments against, if any."""
    annotation = unwrap_optional(member.annotation)
    if typing.get_origin(annotation) is None and isinstance(annotation, type) and _is_inspectable(annotation):
        return annotation
    return None
