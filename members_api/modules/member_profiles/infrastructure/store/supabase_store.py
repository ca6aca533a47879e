# 📄 File: members_api/modules/member_profiles/infrastructure/store/supabase_store.py
# 🧭 Purpose (Layman Explanation):
# Saves and loads member profiles in the hosted Supabase database, one JSON document per member.
#
# 🧪 Purpose (Technical Summary):
# Concrete implementation of the DocumentStore interface over a PostgREST table
# ``(id text primary key, etag text, ts bigint, doc jsonb)`` using the async Supabase client.
# Field predicates run as JSON-path filters on ``doc``; the etag column backs conditional replace.
#
# 🔗 Dependencies:
# - supabase (async client), postgrest (APIError), httpx (transport errors)
# - members_api.shared.config.supabase (client manager)
#
# 🔄 Connected Modules / Calls From:
# - Application factory (STORE_BACKEND=supabase)
# - ProfileService / IdentityReconciler through the DocumentStore interface

"""
Expected table definition:

    create table usuarios (
        id   text primary key,
        etag text not null,
        ts   bigint not null,
        doc  jsonb not null
    );
"""

import asyncio
import json
import time
import uuid
from typing import Any, Dict, List, Optional, Sequence

import httpx
from postgrest import APIError

from members_api.shared.config.supabase import SupabaseManager
from members_api.shared.core.exceptions import (
    ConcurrencyConflictError,
    ProfileNotFoundError,
    StoreUnavailableError,
)
from members_api.shared.utils.logging import get_logger, mask_email
from ...domain.repositories.document_store import (
    SYSTEM_FIELDS,
    Document,
    DocumentStore,
    FieldMatch,
    MatchMode,
)

logger = get_logger(__name__)

PAGE_SIZE = 1000
COLUMNS = "id, etag, ts, doc"


class SupabaseDocumentStore(DocumentStore):
    """
    Supabase implementation of the DocumentStore interface.

    Transport failures, timeouts and PostgREST errors are reported as
    StoreUnavailableError; nothing is retried here.
    """

    def __init__(self, manager: SupabaseManager, table: str = "usuarios"):
        """
        Initialize the store.

        Args:
            manager: Supabase client manager (owns the async client)
            table: Table holding profile documents
        """
        self._manager = manager
        self._table = table

    async def read(self, key: str) -> Optional[Document]:
        query = (await self._query()).select(COLUMNS).eq("id", key).limit(1)
        response = await self._execute("read", query)
        rows = response.data or []
        if not rows:
            logger.debug(f"Document not found: {mask_email(key)}")
            return None
        return self._row_to_document(rows[0])

    async def upsert(self, document: Document) -> Document:
        row = self._document_to_row(document)
        query = (await self._query()).upsert(row)
        await self._execute("upsert", query)
        return self._row_to_document(row)

    async def replace(self, document: Document, if_match: Optional[str] = None) -> Document:
        row = self._document_to_row(document)
        query = (await self._query()).update(
            {"etag": row["etag"], "ts": row["ts"], "doc": row["doc"]}
        ).eq("id", row["id"])
        if if_match is not None:
            query = query.eq("etag", if_match)

        response = await self._execute("replace", query)
        if not response.data:
            if await self.read(row["id"]) is None:
                raise ProfileNotFoundError(mask_email(row["id"]))
            raise ConcurrencyConflictError(mask_email(row["id"]))
        return self._row_to_document(row)

    async def query_any(
        self,
        matches: Sequence[FieldMatch],
        limit: Optional[int] = None
    ) -> List[Document]:
        # PostgREST cannot OR json-path predicates with containment reliably,
        # so each predicate runs as its own request.
        responses = await asyncio.gather(*[self._match_query(match, limit) for match in matches])

        by_id: Dict[str, Document] = {}
        for response in responses:
            for row in response.data or []:
                by_id.setdefault(row["id"], self._row_to_document(row))

        results = [by_id[key] for key in sorted(by_id)]
        return results[:limit] if limit is not None else results

    async def delete(self, key: str) -> bool:
        query = (await self._query()).delete().eq("id", key)
        response = await self._execute("delete", query)
        return bool(response.data)

    async def list_all(self) -> List[Document]:
        documents: List[Document] = []
        start = 0
        while True:
            query = (await self._query()).select(COLUMNS).order("id").range(start, start + PAGE_SIZE - 1)
            response = await self._execute("list", query)
            rows = response.data or []
            documents.extend(self._row_to_document(row) for row in rows)
            if len(rows) < PAGE_SIZE:
                return documents
            start += PAGE_SIZE

    async def ping(self) -> bool:
        try:
            query = (await self._query()).select("id").limit(1)
            await self._execute("ping", query)
            return True
        except StoreUnavailableError as e:
            logger.error(f"Store health check failed: {e.details.get('original_error', '')}")
            return False

    async def close(self) -> None:
        await self._manager.close()

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    async def _query(self):
        try:
            client = await self._manager.get_client()
        except ConnectionError as e:
            raise StoreUnavailableError(operation="connect", original_error=type(e).__name__) from e
        return client.table(self._table)

    async def _match_query(self, match: FieldMatch, limit: Optional[int]):
        query = (await self._query()).select(COLUMNS)
        if match.field == "id":
            query = query.eq("id", match.value)
        elif match.mode is MatchMode.CONTAINS:
            query = query.filter(f"doc->{match.field}", "cs", json.dumps([match.value]))
        else:
            query = query.eq(f"doc->>{match.field}", match.value)
        if limit is not None:
            query = query.limit(limit)
        return await self._execute("query", query)

    async def _execute(self, operation: str, query):
        try:
            return await query.execute()
        except APIError as e:
            logger.error(f"Store {operation} rejected: {e.message}")
            raise StoreUnavailableError(operation=operation, original_error=str(e.message)) from e
        except (httpx.TimeoutException, httpx.TransportError) as e:
            logger.error(f"Store {operation} failed: {type(e).__name__}")
            raise StoreUnavailableError(operation=operation, original_error=type(e).__name__) from e

    @staticmethod
    def _document_to_row(document: Document) -> Dict[str, Any]:
        body = {k: v for k, v in document.items() if k not in SYSTEM_FIELDS}
        return {
            "id": body["id"],
            "etag": uuid.uuid4().hex,
            "ts": int(time.time()),
            "doc": body,
        }

    @staticmethod
    def _row_to_document(row: Dict[str, Any]) -> Document:
        document = dict(row.get("doc") or {})
        document["id"] = row["id"]
        document["_etag"] = row.get("etag")
        document["_ts"] = row.get("ts")
        return document
