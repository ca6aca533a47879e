"""
Tests for the rank certificate timeline: submission, review and the pending queue.
"""
import pytest

from members_api.shared.core.exceptions import (
    CertificateNotFoundError,
    InvalidReviewStatusError,
    ProfileNotFoundError,
)

REVIEWER = "reviewer@example.com"


@pytest.mark.asyncio
async def test_append_certificate_stores_pending_entry(service):
    await service.create({"email": "a@b.com", "name": "Ana"})

    entry = await service.append_certificate("a@b.com", {
        "rank": "verde",
        "status": "approved",
        "fileUrl": "https://files.example.com/cert.pdf",
    })

    assert entry["status"] == "pending"
    assert entry["rank"] == "verde"
    assert entry["fileUrl"] == "https://files.example.com/cert.pdf"
    assert entry["id"]
    assert entry["submittedAt"]
    assert entry["review"] is None
    assert await service.list_certificates("a@b.com") == [entry]


@pytest.mark.asyncio
async def test_certificates_require_an_existing_profile(service):
    with pytest.raises(ProfileNotFoundError):
        await service.append_certificate("nobody@b.com", {"rank": "verde"})
    with pytest.raises(ProfileNotFoundError):
        await service.list_certificates("nobody@b.com")


@pytest.mark.asyncio
async def test_approval_with_rank_update(service):
    await service.create({"email": "a@b.com", "rank": "crua"})
    entry = await service.append_certificate("a@b.com", {"rank": "verde"})

    profile = await service.review_certificate(
        "a@b.com", entry["id"], "approved", note="ok", update_rank=True
    )

    reviewed = profile["certificateTimeline"][0]
    assert reviewed["status"] == "approved"
    assert reviewed["review"]["by"] == REVIEWER
    assert reviewed["review"]["note"] == "ok"
    assert reviewed["review"]["at"]
    assert profile["rank"] == "verde"
    assert profile["rankVerified"] is True


@pytest.mark.asyncio
async def test_rejection_leaves_rank_alone(service):
    await service.create({"email": "a@b.com", "rank": "crua"})
    entry = await service.append_certificate("a@b.com", {"rank": "verde"})

    profile = await service.review_certificate(
        "a@b.com", entry["id"], "rejected", reviewer="admin@b.com", update_rank=True
    )

    assert profile["certificateTimeline"][0]["status"] == "rejected"
    assert profile["certificateTimeline"][0]["review"]["by"] == "admin@b.com"
    assert profile["rank"] == "crua"
    assert profile["rankVerified"] is False


@pytest.mark.asyncio
async def test_review_validates_status_and_certificate(service):
    await service.create({"email": "a@b.com"})

    with pytest.raises(InvalidReviewStatusError):
        await service.review_certificate("a@b.com", "anything", "maybe")
    with pytest.raises(CertificateNotFoundError):
        await service.review_certificate("a@b.com", "missing", "approved")


@pytest.mark.asyncio
async def test_pending_queue_spans_profiles(service):
    await service.create({"email": "a@b.com", "name": "Ana"})
    await service.create({"email": "b@b.com", "name": "Bia"})
    first = await service.append_certificate("a@b.com", {"rank": "verde"})
    await service.append_certificate("b@b.com", {"rank": "amarela"})
    await service.review_certificate("a@b.com", first["id"], "approved")

    pending = await service.list_pending_certificates()

    assert len(pending) == 1
    assert pending[0]["email"] == "b@b.com"
    assert pending[0]["name"] == "Bia"
    assert pending[0]["rank"] == "amarela"
