# 📄 File: members_api/modules/member_profiles/domain/repositories/document_store.py
# 🧭 Purpose (Layman Explanation):
# Defines the contract for how member profile documents are read, saved, searched and deleted,
# without caring which database actually stores them.
# 🧪 Purpose (Technical Summary):
# Repository interface over a partitioned JSON document container where the document id is
# also the partition key. Point reads are single round trips; queries may fan out across partitions.
# 🔗 Dependencies:
# abc, dataclasses, typing
# 🔄 Connected Modules / Calls From:
# Domain services (resolver, reconciliation, uniqueness, profile service),
# infrastructure implementations (in-memory, Supabase)

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

Document = Dict[str, Any]

# Fields the store owns; written by the adapter, never by callers.
SYSTEM_FIELDS = ("_etag", "_ts")


class MatchMode(str, Enum):
    EQUALS = "equals"
    CONTAINS = "contains"  # value is an element of the array field


@dataclass(frozen=True)
class FieldMatch:
    """A single top-level field predicate used by cross-partition queries."""
    field: str
    value: Any
    mode: MatchMode = MatchMode.EQUALS

    def matches(self, document: Document) -> bool:
        current = document.get(self.field)
        if self.mode is MatchMode.CONTAINS:
            return isinstance(current, list) and self.value in current
        return current == self.value


class DocumentStore(ABC):
    """
    Repository interface for the profiles container.

    Implementation Notes:
    - ``id`` is both primary key and partition key
    - Every operation is async; nothing blocks the event loop
    - Not-found on read is a normal outcome (None), not an exception
    - Transport failures and timeouts surface as StoreUnavailableError
    - Documents returned by writes carry the store's ``_etag`` and ``_ts``
    """

    @abstractmethod
    async def read(self, key: str) -> Optional[Document]:
        """
        Point read by partition key.

        Args:
            key: Document id (== partition key)

        Returns:
            Stored document if found, None otherwise
        """
        pass

    @abstractmethod
    async def upsert(self, document: Document) -> Document:
        """
        Create or unconditionally overwrite the document at ``document["id"]``.

        Returns:
            The stored document including system fields
        """
        pass

    @abstractmethod
    async def replace(self, document: Document, if_match: Optional[str] = None) -> Document:
        """
        Overwrite an existing document.

        Args:
            document: Full replacement body
            if_match: Expected current etag; None disables the check

        Returns:
            The stored document including system fields

        Raises:
            ProfileNotFoundError: If no document exists at the key
            ConcurrencyConflictError: If ``if_match`` differs from the stored etag
        """
        pass

    @abstractmethod
    async def query_any(
        self,
        matches: Sequence[FieldMatch],
        limit: Optional[int] = None
    ) -> List[Document]:
        """
        Cross-partition query returning documents matching ANY predicate.

        Results are de-duplicated by id and ordered by id.
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Delete by partition key.

        Returns:
            True if deleted, False if it did not exist
        """
        pass

    @abstractmethod
    async def list_all(self) -> List[Document]:
        """Return every document in the container (administrative use)."""
        pass

    @abstractmethod
    async def ping(self) -> bool:
        """Connectivity check; False instead of raising when unreachable."""
        pass
