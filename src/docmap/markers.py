"""Class decorators that configure how a document type is stored."""

from typing import TypeVar

T = TypeVar("T", bound=type)

OPTIMISTIC_CONCURRENCY_ATTR = "__docmap_optimistic_concurrency__"


def use_optimistic_concurrency(cls: T) -> T:
    """Mark a document type as versioned with optimistic concurrency checks."""
    setattr(cls, OPTIMISTIC_CONCURRENCY_ATTR, True)
    return cls


def has_optimistic_concurrency(cls: type) -> bool:
    return bool(getattr(cls, OPTIMISTIC_CONCURRENCY_ATTR, False))
