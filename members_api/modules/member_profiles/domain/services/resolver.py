"""
Point lookup of profile documents by partition key.
"""

from typing import Optional

from members_api.shared.utils.validators import normalize_identity
from ..repositories.document_store import Document, DocumentStore


class PointLookupResolver:
    """Single round-trip read keyed by partition key. Not-found returns None."""

    def __init__(self, store: DocumentStore):
        self._store = store

    async def get_by_key(self, key: str) -> Optional[Document]:
        key = normalize_identity(key)
        if not key:
            return None
        return await self._store.read(key)
