"""
Tests for the national ID probe and the duplicate-claim sweep.
"""
import pytest

from members_api.modules.member_profiles.domain.services.uniqueness import NationalIdProbe
from members_api.modules.member_profiles.infrastructure.store.memory_store import InMemoryDocumentStore
from members_api.shared.core.exceptions import StoreUnavailableError
from members_api.shared.core.security import NationalIdHasher


def test_hash_is_salted_sha256_hex():
    digest = NationalIdHasher("salt").hash("11122233344")

    assert len(digest) == 64
    assert digest == NationalIdHasher("salt")("11122233344")
    assert digest != NationalIdHasher("other").hash("11122233344")


@pytest.mark.asyncio
async def test_probe_by_hash_returns_claimant():
    store = InMemoryDocumentStore([{"id": "a@b.com", "email": "a@b.com", "nationalIdHash": "h1"}])
    claimant = await NationalIdProbe(store).probe("h1")

    assert claimant.id == "a@b.com"
    assert claimant.email == "a@b.com"


@pytest.mark.asyncio
async def test_probe_uses_digits_only_without_hash():
    store = InMemoryDocumentStore([{"id": "u1", "email": "a@b.com", "nationalId": "11122233344"}])
    probe = NationalIdProbe(store)

    assert (await probe.probe(None, "11122233344")).email == "a@b.com"
    assert await probe.probe("unknown-hash", "11122233344") is None
    assert await probe.probe(None, None) is None


@pytest.mark.asyncio
async def test_probe_fails_open_only_when_asked():
    store = InMemoryDocumentStore()
    store.available = False
    probe = NationalIdProbe(store)

    assert await probe.probe("h1", fail_open=True) is None
    with pytest.raises(StoreUnavailableError):
        await probe.probe("h1")


@pytest.mark.asyncio
async def test_find_duplicate_claims_reports_shared_hashes():
    store = InMemoryDocumentStore([
        {"id": "b@b.com", "nationalIdHash": "h1"},
        {"id": "a@b.com", "nationalIdHash": "h1"},
        {"id": "c@b.com", "nationalIdHash": "h2"},
        {"id": "d@b.com", "nationalIdHash": None},
    ])

    assert await NationalIdProbe(store).find_duplicate_claims() == {"h1": ["a@b.com", "b@b.com"]}


@pytest.mark.asyncio
async def test_claimants_lists_every_holder_up_to_limit():
    store = InMemoryDocumentStore([
        {"id": "b@b.com", "email": "b@b.com", "nationalIdHash": "h1"},
        {"id": "u7", "email": "c@b.com", "nationalIdHash": "h1"},
        {"id": "a@b.com", "email": "a@b.com", "nationalIdHash": "h1"},
    ])
    probe = NationalIdProbe(store)

    claimants = await probe.claimants("h1")

    assert [(c.id, c.email) for c in claimants] == [
        ("a@b.com", "a@b.com"),
        ("b@b.com", "b@b.com"),
        ("u7", "c@b.com"),
    ]
    assert len(await probe.claimants("h1", limit=2)) == 2
    assert await probe.claimants("unknown") == []
