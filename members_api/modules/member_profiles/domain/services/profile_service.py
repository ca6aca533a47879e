# 📄 File: members_api/modules/member_profiles/domain/services/profile_service.py
# 🧭 Purpose (Layman Explanation):
# The one place the rest of the app goes to find, create or change a member's profile,
# check whether a national ID is already taken, and handle rank certificate reviews.
# 🧪 Purpose (Technical Summary):
# Domain service composing the point-lookup resolver, identity reconciler, normalizer and
# national ID probe into the write path (upsert / merge-replace with etag) and the read path.
# Every read of an identity goes through reconciliation, so any update may heal legacy records
# and delete superseded duplicates as a side effect.
# 🔗 Dependencies:
# Domain models, document store port, reconciliation, normalizer, uniqueness, hasher
# 🔄 Connected Modules / Calls From:
# API profile endpoints, first-login flows, admin certificate review

from typing import Any, Dict, List, Optional, Tuple

from members_api.shared.core.exceptions import (
    CertificateNotFoundError,
    DuplicateClaimError,
    InvalidEmailError,
    InvalidNationalIdError,
    InvalidReviewStatusError,
    MissingIdentityError,
    ProfileNotFoundError,
)
from members_api.shared.core.security import NationalIdHasher
from members_api.shared.utils.logging import get_logger, mask_email
from members_api.shared.utils.validators import (
    normalize_identity,
    normalize_national_id,
    validate_email_address,
    validate_national_id,
)
from ..models.profile import (
    AccessLevel,
    CanonicalProfile,
    CertificateEntry,
    CertificateReview,
    CertificateStatus,
    Claimant,
    EventsPermission,
    utc_now_iso,
)
from ..repositories.document_store import SYSTEM_FIELDS, DocumentStore
from .normalizer import normalize_profile, resolve_key
from .reconciliation import IdentityReconciler, ReconciliationResult
from .resolver import PointLookupResolver
from .uniqueness import NationalIdProbe

logger = get_logger(__name__)

# Kept from the existing profile when a registration re-submits without them.
AUDIT_FIELDS = ("createdVia", "createdAt", "certificateTimeline")

# Identity is owned by the key; patches cannot move a profile.
IMMUTABLE_PATCH_FIELDS = ("id", "primaryEmail", "emails", "pendingCleanup") + SYSTEM_FIELDS


class ProfileService:
    """
    Domain service for member profiles.

    Public operations:
    - lookup / get: resolve an identity token to its canonical profile
    - create / register: first registration (unconditional upsert)
    - update: merge-replace with national ID uniqueness enforcement
    - check_unique: pre-submit national ID availability check
    - ensure_profile: minimal shell on first social login
    - certificate timeline: append, review, list, pending queue
    - repair / find_duplicate_claims: maintenance sweeps

    The store handle and the hasher are passed in; the service holds no
    process-wide state.
    """

    def __init__(
        self,
        store: DocumentStore,
        hasher: NationalIdHasher,
        reviewer: str = "",
        strict_reconciliation: bool = False
    ):
        self._store = store
        self._hasher = hasher
        self._reviewer = reviewer
        self.resolver = PointLookupResolver(store)
        self.reconciler = IdentityReconciler(store, self.resolver, strict=strict_reconciliation)
        self.probe = NationalIdProbe(store)

    # ------------------------------------------------------------------
    # read path
    # ------------------------------------------------------------------

    async def lookup(self, identity: str) -> Optional[CanonicalProfile]:
        """
        Resolve an identity token to its canonical profile.

        May migrate a legacy document and delete superseded duplicates.

        Returns:
            Canonical profile, or None if the person has no profile yet
        """
        result = await self.reconciler.reconcile(identity)
        return result.profile

    async def get(self, identity: str) -> CanonicalProfile:
        """Like lookup, but a missing profile raises ProfileNotFoundError."""
        profile = await self.lookup(identity)
        if profile is None:
            raise ProfileNotFoundError(mask_email(normalize_identity(identity)))
        return profile

    async def list_profiles(self) -> List[CanonicalProfile]:
        """Every stored document, as stored (administrative listing)."""
        return await self._store.list_all()

    async def check_unique(self, national_id: str) -> Optional[Claimant]:
        """
        Pre-submit availability check for a national ID.

        Invalid input is reported as "no claimant"; a store failure fails open.
        """
        result = validate_national_id(national_id)
        if not result.is_valid:
            return None
        return await self.probe.probe(self._hasher.hash(result.value), result.value, fail_open=True)

    async def check_unique_hash(self, national_id_hash: str) -> Optional[Claimant]:
        """Availability check for callers that only hold the salted hash."""
        if not national_id_hash:
            return None
        return await self.probe.probe(national_id_hash, fail_open=True)

    # ------------------------------------------------------------------
    # write path
    # ------------------------------------------------------------------

    async def upsert(self, partial: Dict[str, Any]) -> CanonicalProfile:
        """Normalize and unconditionally overwrite the document at the canonical key."""
        profile = normalize_profile(partial)
        stored = await self._store.upsert(profile)
        logger.info(f"Upserted profile {mask_email(profile['id'])}")
        return stored

    async def create(self, partial: Dict[str, Any]) -> CanonicalProfile:
        """First registration. See register() for the created flag."""
        profile, _ = await self.register(partial)
        return profile

    async def register(self, partial: Dict[str, Any]) -> Tuple[CanonicalProfile, bool]:
        """
        Registration: validate the national ID, enforce its uniqueness, then upsert.

        Re-registering an existing identity overwrites it, keeping its
        creation provenance and certificate timeline when not re-sent.

        Returns:
            (profile, created) where created is False if the identity existed

        Raises:
            MissingIdentityError: If neither id nor email is given
            InvalidEmailError: If the identity is not an email address
            InvalidNationalIdError: If the national ID is not 11 digits
            DuplicateClaimError: If another profile holds the national ID
        """
        body = dict(partial or {})
        key = resolve_key({"id": body.get("email") or body.get("id")})
        self._ensure_email(key)
        self._prepare_national_id(body)

        if body.get("nationalIdHash"):
            await self._ensure_unclaimed(key, body["nationalIdHash"])

        existing = await self.lookup(key)
        if existing is not None:
            for name in AUDIT_FIELDS:
                if name not in body and existing.get(name) is not None:
                    body[name] = existing[name]

        body["id"] = key
        body["email"] = key
        profile = await self.upsert(body)

        created = existing is None
        logger.log_business_event(
            "profile_registered",
            f"Registered profile {mask_email(key)}",
            entity_id=mask_email(key),
            extra={"created": created},
        )
        return profile, created

    async def update(
        self,
        identity: str,
        patch: Dict[str, Any],
        if_match: Optional[str] = None
    ) -> CanonicalProfile:
        """
        Merge a patch over the canonical profile and write it back.

        The current profile is read through reconciliation, so this call can
        migrate legacy documents and delete duplicates. A missing profile is
        created from the patch.

        Args:
            identity: Email identifying the profile
            patch: Fields to overwrite (shallow merge)
            if_match: Etag the caller last saw; defaults to the etag read here

        Raises:
            MissingIdentityError: If the identity is empty
            InvalidEmailError: If the identity is not an email address; nothing is written
            DuplicateClaimError: If the patch moves the national ID onto one
                already held by another profile; nothing is written
            ConcurrencyConflictError: If the profile changed since it was read
        """
        key = normalize_identity(identity)
        if not key:
            raise MissingIdentityError()
        self._ensure_email(key)

        changes = {k: v for k, v in (patch or {}).items() if k not in IMMUTABLE_PATCH_FIELDS}
        self._prepare_national_id(changes)

        current = await self.lookup(key)

        new_hash = changes.get("nationalIdHash")
        if new_hash and new_hash != (current or {}).get("nationalIdHash"):
            await self._ensure_unclaimed(key, new_hash)

        changes["email"] = key
        if current is None:
            stored = await self._store.upsert(normalize_profile({**changes, "id": key}, key=key))
            logger.info(f"Created profile {mask_email(key)} from update")
            return stored

        stored = await self._replace(current, changes, if_match)
        logger.info(
            f"Updated profile {mask_email(key)}",
            updated_fields=sorted(k for k in changes if k not in ("email", "nationalId", "nationalIdHash")),
        )
        return stored

    async def ensure_profile(
        self,
        email: str,
        created_via: str,
        name: str = ""
    ) -> Tuple[CanonicalProfile, bool]:
        """
        Make sure a canonical profile exists for a freshly authenticated email.

        Returns:
            (profile, created)
        """
        self._ensure_email(normalize_identity(email))
        existing = await self.lookup(email)
        if existing is not None:
            return existing, False

        profile = await self.upsert({
            "id": email,
            "email": email,
            "name": name,
            "createdVia": created_via,
            "accessLevel": AccessLevel.VISITOR.value,
            "eventsPermission": EventsPermission.READER.value,
            "termsAccepted": False,
            "createdAt": utc_now_iso(),
        })
        logger.log_business_event(
            "profile_shell_created",
            f"Created profile shell for {mask_email(profile['id'])}",
            entity_id=mask_email(profile["id"]),
            extra={"created_via": created_via},
        )
        return profile, True

    # ------------------------------------------------------------------
    # certificate timeline
    # ------------------------------------------------------------------

    async def list_certificates(self, identity: str) -> List[Dict[str, Any]]:
        profile = await self.get(identity)
        return list(profile.get("certificateTimeline") or [])

    async def append_certificate(self, identity: str, entry: Dict[str, Any]) -> Dict[str, Any]:
        """
        Add a certificate submission to the profile's timeline.

        The entry is stored as pending with a fresh id and submission time;
        client-supplied status/review/id values are ignored.
        """
        self._ensure_email(normalize_identity(identity))
        profile = await self.get(identity)

        data = {k: v for k, v in (entry or {}).items() if k not in ("id", "status", "review")}
        certificate = CertificateEntry(**data).to_document()

        timeline = list(profile.get("certificateTimeline") or []) + [certificate]
        await self._replace(profile, {"certificateTimeline": timeline})

        logger.info(f"Certificate submitted for {mask_email(profile['id'])}", rank=certificate["rank"])
        return certificate

    async def review_certificate(
        self,
        identity: str,
        certificate_id: str,
        status: str,
        note: str = "",
        reviewer: Optional[str] = None,
        update_rank: bool = False
    ) -> CanonicalProfile:
        """
        Approve or reject a certificate.

        When approved with ``update_rank``, the certificate's rank is copied
        onto the profile and marked verified.

        Raises:
            InvalidReviewStatusError: If status is not approved/rejected
            ProfileNotFoundError / CertificateNotFoundError
        """
        if status not in (CertificateStatus.APPROVED.value, CertificateStatus.REJECTED.value):
            raise InvalidReviewStatusError(status)

        self._ensure_email(normalize_identity(identity))
        profile = await self.get(identity)
        timeline = [dict(item) for item in profile.get("certificateTimeline") or []]

        index = next((i for i, item in enumerate(timeline) if item.get("id") == certificate_id), None)
        if index is None:
            raise CertificateNotFoundError(certificate_id)

        review = CertificateReview(by=reviewer or self._reviewer, note=note or "")
        timeline[index].update({"status": status, "review": review.model_dump()})

        changes: Dict[str, Any] = {"certificateTimeline": timeline}
        if status == CertificateStatus.APPROVED.value and update_rank:
            changes["rank"] = timeline[index].get("rank", "")
            changes["rankVerified"] = True

        stored = await self._replace(profile, changes)
        logger.log_business_event(
            "certificate_reviewed",
            f"Certificate {status} for {mask_email(profile['id'])}",
            entity_id=mask_email(profile["id"]),
            extra={"certificate_id": certificate_id, "rank_updated": "rank" in changes},
        )
        return stored

    async def list_pending_certificates(self) -> List[Dict[str, Any]]:
        """All pending certificates across profiles, with owner email and name."""
        pending = []
        for profile in await self._store.list_all():
            for item in profile.get("certificateTimeline") or []:
                if isinstance(item, dict) and item.get("status") == CertificateStatus.PENDING.value:
                    pending.append({
                        "email": profile.get("email") or profile.get("id"),
                        "name": profile.get("name", ""),
                        **item,
                    })
        return pending

    # ------------------------------------------------------------------
    # maintenance
    # ------------------------------------------------------------------

    async def repair(self, identity: str) -> ReconciliationResult:
        """Reconcile with a forced scan so leftovers beside a canonical profile are removed."""
        return await self.reconciler.reconcile(identity, force_scan=True)

    async def find_duplicate_claims(self) -> Dict[str, List[str]]:
        return await self.probe.find_duplicate_claims()

    async def health_check(self) -> Dict[str, Any]:
        reachable = await self._store.ping()
        return {"store": "healthy" if reachable else "unavailable"}

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _prepare_national_id(self, body: Dict[str, Any]) -> None:
        """
        Replace a submitted national ID with its digits and salted hash.

        An empty value means "no change". Client-supplied hashes are dropped.
        """
        body.pop("nationalIdHash", None)
        if "nationalId" not in body:
            return

        raw = body.pop("nationalId")
        if not normalize_national_id(raw):
            return

        result = validate_national_id(raw)
        if not result.is_valid:
            raise InvalidNationalIdError(result.error_message, digits=len(result.value))

        body["nationalId"] = result.value
        body["nationalIdHash"] = self._hasher.hash(result.value)

    @staticmethod
    def _ensure_email(key: str) -> None:
        result = validate_email_address(key)
        if not result.is_valid:
            raise InvalidEmailError(result.error_message)

    async def _ensure_unclaimed(self, key: str, national_id_hash: str) -> None:
        # Every holder is checked; a prior race may have left one beside the caller.
        for claimant in await self.probe.claimants(national_id_hash):
            if key in (claimant.id, normalize_identity(claimant.email)):
                continue
            logger.warning(
                f"National ID conflict for {mask_email(key)}",
                claimant=mask_email(claimant.id),
            )
            raise DuplicateClaimError(claimant.id, claimant.email)

    async def _replace(
        self,
        current: CanonicalProfile,
        changes: Dict[str, Any],
        if_match: Optional[str] = None
    ) -> CanonicalProfile:
        key = current["id"]
        merged = normalize_profile({**current, **changes}, key=key)
        return await self._store.replace(merged, if_match=if_match or current.get("_etag"))
