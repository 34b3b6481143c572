"""Exceptions raised while configuring document mappings."""


class MappingError(Exception):
    """Base class for document mapping configuration failures."""


class UnknownMemberError(MappingError, AttributeError):
    """A member path does not resolve against the mapped type."""

    def __init__(self, document_type: type, member_path: str, segment: str | None = None) -> None:
        self.document_type = document_type
        self.member_path = member_path
        self.segment = segment or member_path
        super().__init__(f"'{document_type.__name__}' has no member '{self.segment}' (path '{member_path}')")


class InvalidSubclassError(MappingError, TypeError):
    """A registered subclass is not part of the document type's hierarchy."""


class DuplicateColumnNameError(MappingError, ValueError):
    """A duplicated field would reuse an existing column name."""

    def __init__(self, column_name: str, table_name: str) -> None:
        self.column_name = column_name
        self.table_name = table_name
        super().__init__(f"column '{column_name}' already exists on '{table_name}'")


class InvalidDocumentError(MappingError, TypeError):
    """The type cannot be stored as a document."""
