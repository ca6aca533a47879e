"""
Tests for the in-memory document store.
"""
import pytest

from members_api.modules.member_profiles.domain.repositories.document_store import FieldMatch, MatchMode
from members_api.modules.member_profiles.infrastructure.store.memory_store import InMemoryDocumentStore
from members_api.shared.core.exceptions import (
    ConcurrencyConflictError,
    ProfileNotFoundError,
    StoreUnavailableError,
)


@pytest.mark.asyncio
async def test_upsert_then_read_returns_stamped_copy():
    store = InMemoryDocumentStore()
    stored = await store.upsert({"id": "a@b.com", "name": "Ana"})

    assert stored["_etag"]
    found = await store.read("a@b.com")
    assert found == stored

    found["name"] = "changed"
    assert (await store.read("a@b.com"))["name"] == "Ana"


@pytest.mark.asyncio
async def test_read_missing_returns_none():
    assert await InMemoryDocumentStore().read("nobody@b.com") is None


@pytest.mark.asyncio
async def test_replace_checks_etag():
    store = InMemoryDocumentStore()
    stored = await store.upsert({"id": "a@b.com", "name": "Ana"})
    await store.replace({"id": "a@b.com", "name": "Bia"}, if_match=stored["_etag"])

    with pytest.raises(ConcurrencyConflictError):
        await store.replace({"id": "a@b.com", "name": "Cris"}, if_match=stored["_etag"])

    assert (await store.read("a@b.com"))["name"] == "Bia"


@pytest.mark.asyncio
async def test_replace_missing_document_raises_not_found():
    with pytest.raises(ProfileNotFoundError):
        await InMemoryDocumentStore().replace({"id": "a@b.com"})


@pytest.mark.asyncio
async def test_query_any_matches_any_predicate_sorted_and_limited():
    store = InMemoryDocumentStore([
        {"id": "u2", "email": "a@b.com"},
        {"id": "u1", "emails": ["a@b.com"]},
        {"id": "u3", "email": "c@d.com"},
    ])
    matches = [FieldMatch("email", "a@b.com"), FieldMatch("emails", "a@b.com", MatchMode.CONTAINS)]

    assert [d["id"] for d in await store.query_any(matches)] == ["u1", "u2"]
    assert [d["id"] for d in await store.query_any(matches, limit=1)] == ["u1"]


@pytest.mark.asyncio
async def test_delete_reports_whether_anything_was_removed():
    store = InMemoryDocumentStore([{"id": "u1"}])

    assert await store.delete("u1") is True
    assert await store.delete("u1") is False
    assert store.write_count == 2


@pytest.mark.asyncio
async def test_unavailable_store_raises():
    store = InMemoryDocumentStore()
    store.available = False

    with pytest.raises(StoreUnavailableError):
        await store.read("a@b.com")
    assert await store.ping() is False
