"""
Repository interfaces for the member profiles domain.
"""

from .document_store import Document, DocumentStore, FieldMatch, MatchMode, SYSTEM_FIELDS

__all__ = [
    "Document",
    "DocumentStore",
    "FieldMatch",
    "MatchMode",
    "SYSTEM_FIELDS",
]
