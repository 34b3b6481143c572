"""docmap - Map Python document types onto PostgreSQL jsonb storage."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("docmap")
except PackageNotFoundError:
    __version__ = "unknown"

__all__ = ["__version__"]
