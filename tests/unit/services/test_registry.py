"""Unit tests for the MappingRegistry."""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from structlog.testing import capture_logs

from docmap.config import StoreOptions
from docmap.services.registry import MappingRegistry


@dataclass
class User:
    id: int = 0
    first_name: str = ""


@dataclass
class Invoice:
    id: str = ""


class TestMappingRegistry:
    """Tests for mapping creation and caching."""

    def test_returns_same_mapping_for_type(self) -> None:
        registry = MappingRegistry()

        assert registry.mapping_for(User) is registry.mapping_for(User)
        assert len(registry) == 1
        assert User in registry

    def test_mappings_use_configured_schema(self) -> None:
        registry = MappingRegistry(options=StoreOptions(database_schema_name="Sales"))

        mapping = registry.mapping_for(Invoice)

        assert mapping.schema_name == "sales"
        assert mapping.qualified_table_name == "sales.mt_doc_invoice"

    def test_all_mappings_in_creation_order(self) -> None:
        registry = MappingRegistry()
        registry.mapping_for(Invoice)
        registry.mapping_for(User)

        assert [mapping.document_type for mapping in registry.all_mappings()] == [Invoice, User]
        assert [mapping.alias for mapping in registry] == ["invoice", "user"]

    def test_concurrent_callers_share_one_mapping(self) -> None:
        registry = MappingRegistry()

        with ThreadPoolExecutor(max_workers=8) as pool:
            mappings = list(pool.map(lambda _: registry.mapping_for(User), range(32)))

        assert all(mapping is mappings[0] for mapping in mappings)
        assert len(registry) == 1

    def test_configuration_is_visible_through_registry(self) -> None:
        registry = MappingRegistry()
        registry.mapping_for(User).duplicate_field("FirstName")

        assert registry.mapping_for(User).table.column_names[-1] == "first_name"

    def test_build_metadata(self) -> None:
        registry = MappingRegistry()
        registry.mapping_for(User)
        registry.mapping_for(Invoice)

        metadata = registry.build_metadata()

        assert set(metadata.tables) == {"public.mt_doc_user", "public.mt_doc_invoice"}

    def test_registration_is_logged(self) -> None:
        registry = MappingRegistry()
        with capture_logs() as logs:
            registry.mapping_for(User)

        registered = [entry for entry in logs if entry["event"] == "mapping_registered"]
        assert registered[0]["table"] == "public.mt_doc_user"
        assert registered[0]["log_level"] == "info"
