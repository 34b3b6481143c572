"""Process-wide registry of document mappings."""

import threading
from typing import Iterator

import sqlalchemy as sa
import structlog

from docmap.config import StoreOptions, get_store_options
from docmap.services.mapping import DocumentMapping


class MappingRegistry:
    """Creates and caches one DocumentMapping per document type.

    Mappings are created under a lock so concurrent callers always receive
    the same instance. Configure mappings during startup; after that they
    are only read.
    """

    def __init__(
        self,
        options: StoreOptions | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._options = options or get_store_options()
        self._logger = logger or structlog.get_logger(__name__)
        self._mappings: dict[type, DocumentMapping] = {}
        self._lock = threading.Lock()

    def __contains__(self, document_type: type) -> bool:
        return document_type in self._mappings

    def __len__(self) -> int:
        return len(self._mappings)

    def __iter__(self) -> Iterator[DocumentMapping]:
        return iter(list(self._mappings.values()))

    def mapping_for(self, document_type: type) -> DocumentMapping:
        """Return the mapping for a type, creating it on first use."""
        mapping = self._mappings.get(document_type)
        if mapping is not None:
            return mapping

        with self._lock:
            mapping = self._mappings.get(document_type)
            if mapping is None:
                mapping = DocumentMapping(
                    document_type,
                    options=self._options,
                    logger=self._logger,
                )
                self._mappings[document_type] = mapping
                self._logger.info(
                    "mapping_registered",
                    document_type=document_type.__name__,
                    table=mapping.qualified_table_name,
                )
        return mapping

    def all_mappings(self) -> list[DocumentMapping]:
        return list(self._mappings.values())

    def build_metadata(self) -> sa.MetaData:
        """Materialize every registered mapping's table into one MetaData."""
        metadata = sa.MetaData()
        for mapping in self.all_mappings():
            mapping.schema_objects.to_sqlalchemy(metadata)
        return metadata
