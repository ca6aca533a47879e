# 📄 File: members_api/modules/member_profiles/infrastructure/store/memory_store.py
# 🧭 Purpose (Layman Explanation):
# A stand-in database that keeps member profiles in memory, used when running locally
# and in tests so no cloud account is needed.
# 🧪 Purpose (Technical Summary):
# In-process implementation of the DocumentStore interface with per-document etags,
# deep-copy isolation, operation counters and a switch to simulate store outages.
# 🔗 Dependencies:
# asyncio, copy, collections.Counter, uuid
# 🔄 Connected Modules / Calls From:
# Application factory (STORE_BACKEND=memory), test fixtures

import asyncio
import copy
import time
import uuid
from collections import Counter
from typing import Dict, Iterable, List, Optional, Sequence

from members_api.shared.core.exceptions import (
    ConcurrencyConflictError,
    ProfileNotFoundError,
    StoreUnavailableError,
)
from members_api.shared.utils.logging import mask_email
from ...domain.repositories.document_store import (
    SYSTEM_FIELDS,
    Document,
    DocumentStore,
    FieldMatch,
)

WRITE_OPERATIONS = ("upsert", "replace", "delete")


class InMemoryDocumentStore(DocumentStore):
    """
    DocumentStore kept in a dict keyed by document id.

    Each call is atomic per document, like the managed store; there is no
    multi-document transaction. ``operations`` counts calls by name so tests
    can assert how many writes a flow performed.
    """

    def __init__(self, documents: Iterable[Document] = ()):
        self._documents: Dict[str, Document] = {}
        self._lock = asyncio.Lock()
        self.operations: Counter = Counter()
        self.available = True
        for document in documents:
            self.seed(document)

    def seed(self, document: Document) -> Document:
        """Insert a document as-is (no normalization, not counted as a write)."""
        stored = self._stamp(document)
        self._documents[stored["id"]] = stored
        return copy.deepcopy(stored)

    @property
    def write_count(self) -> int:
        return sum(self.operations[name] for name in WRITE_OPERATIONS)

    def snapshot(self) -> List[Document]:
        """All documents ordered by id, without touching counters."""
        return [copy.deepcopy(self._documents[key]) for key in sorted(self._documents)]

    # ------------------------------------------------------------------
    # DocumentStore
    # ------------------------------------------------------------------

    async def read(self, key: str) -> Optional[Document]:
        self._record("read")
        document = self._documents.get(key)
        return copy.deepcopy(document) if document is not None else None

    async def upsert(self, document: Document) -> Document:
        self._record("upsert")
        async with self._lock:
            stored = self._stamp(document)
            self._documents[stored["id"]] = stored
            return copy.deepcopy(stored)

    async def replace(self, document: Document, if_match: Optional[str] = None) -> Document:
        self._record("replace")
        async with self._lock:
            key = document["id"]
            current = self._documents.get(key)
            if current is None:
                raise ProfileNotFoundError(mask_email(key))
            if if_match is not None and current.get("_etag") != if_match:
                raise ConcurrencyConflictError(mask_email(key))
            stored = self._stamp(document)
            self._documents[key] = stored
            return copy.deepcopy(stored)

    async def query_any(
        self,
        matches: Sequence[FieldMatch],
        limit: Optional[int] = None
    ) -> List[Document]:
        self._record("query")
        results = [
            copy.deepcopy(self._documents[key])
            for key in sorted(self._documents)
            if any(match.matches(self._documents[key]) for match in matches)
        ]
        return results[:limit] if limit is not None else results

    async def delete(self, key: str) -> bool:
        self._record("delete")
        async with self._lock:
            return self._documents.pop(key, None) is not None

    async def list_all(self) -> List[Document]:
        self._record("list")
        return [copy.deepcopy(self._documents[key]) for key in sorted(self._documents)]

    async def ping(self) -> bool:
        return self.available

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _record(self, operation: str) -> None:
        if not self.available:
            raise StoreUnavailableError(operation=operation)
        self.operations[operation] += 1

    @staticmethod
    def _stamp(document: Document) -> Document:
        stored = {k: copy.deepcopy(v) for k, v in document.items() if k not in SYSTEM_FIELDS}
        stored["_etag"] = uuid.uuid4().hex
        stored["_ts"] = int(time.time())
        return stored
