"""Export books to portable formats."""

from .json_export import JSONExporter, JSONExportResult, book_to_legacy_dict

__all__ = [
    "JSONExporter",
    "JSONExportResult",
    "book_to_legacy_dict",
]
