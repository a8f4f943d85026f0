"""Import books from other reading trackers."""

from .legacy_json import (
    ImportResult,
    LegacyImportError,
    LegacyJSONImporter,
    legacy_record_to_book,
    migrate_legacy_record,
)

__all__ = [
    "ImportResult",
    "LegacyImportError",
    "LegacyJSONImporter",
    "legacy_record_to_book",
    "migrate_legacy_record",
]
