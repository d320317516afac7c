from .record_schema import IngredientRecord, Status, SCHEMA_VERSION
from .migration import migrate_document, migrate_legacy_record
from .knowledge_store import KnowledgeStore

__all__ = [
    "IngredientRecord",
    "Status",
    "SCHEMA_VERSION",
    "migrate_document",
    "migrate_legacy_record",
    "KnowledgeStore",
]
