"""Store-wide options shared by every document mapping."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from docmap.models.base import ensure_identifier
from docmap.models.enums import EnumStorage

DEFAULT_SCHEMA_NAME = "public"


class StoreOptions(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="DOCMAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_schema_name: str = Field(default=DEFAULT_SCHEMA_NAME)
    enum_storage: EnumStorage = Field(default=EnumStorage.AS_INTEGER)

    @field_validator("database_schema_name", mode="before")
    @classmethod
    def _normalize_schema_name(cls, value: str) -> str:
        return ensure_identifier(value, "database_schema_name")


@lru_cache
def get_store_options() -> StoreOptions:
    return StoreOptions()
