# 📄 File: members_api/modules/member_profiles/domain/services/reconciliation.py
# 🧭 Purpose (Layman Explanation):
# Finds "the" profile for an email even when old versions of the app saved the same person
# under different ids, moves that data into the current format, and removes the leftovers.
# 🧪 Purpose (Technical Summary):
# Identity reconciliation state machine (FastHit / Miss / SlowScan-Canonical / SlowScan-Legacy).
# Point read first, cross-partition scan on miss, migration of legacy shapes through the
# normalizer, and deletion of superseded duplicates. Re-entrant: superseded ids are recorded on
# the migrated document (pendingCleanup) before any delete, so an interrupted run is finished
# by the next one.
# 🔗 Dependencies:
# Document store port, normalizer, document shapes, structured logging
# 🔄 Connected Modules / Calls From:
# ProfileService (lookup, merge, ensure, repair)

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from members_api.shared.core.exceptions import (
    ConcurrencyConflictError,
    InconsistentIdentityError,
    MissingIdentityError,
)
from members_api.shared.utils.logging import get_logger, mask_email
from members_api.shared.utils.validators import normalize_identity
from ..models.document_shapes import RawDocument, classify_document
from ..repositories.document_store import (
    SYSTEM_FIELDS,
    Document,
    DocumentStore,
    FieldMatch,
    MatchMode,
)
from .normalizer import normalize_profile
from .resolver import PointLookupResolver

logger = get_logger(__name__)


class ReconciliationOutcome(str, Enum):
    FAST_HIT = "fast_hit"
    MISS = "miss"
    SLOW_SCAN_CANONICAL = "slow_scan_canonical"
    SLOW_SCAN_LEGACY = "slow_scan_legacy"


@dataclass
class ReconciliationResult:
    """What a reconciliation run found and did."""
    outcome: ReconciliationOutcome
    profile: Optional[Document] = None
    legacy_count: int = 0
    removed_ids: List[str] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.profile is not None


def identity_matches(token: str) -> List[FieldMatch]:
    """Every historically valid place an email could identify a profile."""
    return [
        FieldMatch("id", token),
        FieldMatch("primaryEmail", token),
        FieldMatch("email", token),
        FieldMatch("emails", token, MatchMode.CONTAINS),
    ]


class IdentityReconciler:
    """
    Resolves an identity token to its single canonical profile document.

    Side effects: besides the migration write, a run may DELETE other
    documents that matched the same identity. Every update path that reads
    through this class inherits that behaviour.

    When several legacy documents match, the first one (store order) is taken
    as authoritative and the rest are assumed to be the same person. With
    ``strict=True`` candidates that disagree on their national ID hash raise
    InconsistentIdentityError instead of being collapsed.
    """

    def __init__(
        self,
        store: DocumentStore,
        resolver: Optional[PointLookupResolver] = None,
        strict: bool = False
    ):
        self._store = store
        self._resolver = resolver or PointLookupResolver(store)
        self._strict = strict

    async def reconcile(self, token: str, force_scan: bool = False) -> ReconciliationResult:
        """
        Run the reconciliation algorithm for an identity token.

        Args:
            token: Email (or canonical id) identifying the person
            force_scan: Skip the fast path so leftovers are collected even
                when the canonical document already exists

        Returns:
            ReconciliationResult; ``profile`` is None on a miss

        Raises:
            MissingIdentityError: If the token is empty
            StoreUnavailableError: On store failure (no retry here)
        """
        token = normalize_identity(token)
        if not token:
            raise MissingIdentityError()

        if not force_scan:
            found = await self._resolver.get_by_key(token)
            if found is not None:
                if found.get("pendingCleanup"):
                    found = await self._finish_cleanup(found, [])
                return ReconciliationResult(ReconciliationOutcome.FAST_HIT, found)

        rows = await self._store.query_any(identity_matches(token))
        candidates = [classify_document(row, token) for row in rows]

        if not candidates:
            logger.debug(f"No profile for {mask_email(token)}")
            return ReconciliationResult(ReconciliationOutcome.MISS)

        canonical = next((c for c in candidates if c.is_canonical), None)
        if canonical is not None:
            others = [c.id for c in candidates if c.id != token]
            profile = canonical.document
            if others or profile.get("pendingCleanup"):
                profile = await self._finish_cleanup(profile, others)
            return ReconciliationResult(
                ReconciliationOutcome.SLOW_SCAN_CANONICAL,
                profile,
                removed_ids=others,
            )

        self._check_ambiguity(token, candidates)
        superseded = [c.id for c in candidates]
        migrated = self._migrate(token, candidates[0], superseded)

        stored = await self._store.upsert(migrated)
        logger.log_business_event(
            "profile_migrated",
            f"Migrated {len(candidates)} legacy document(s) to canonical profile {mask_email(token)}",
            entity_id=mask_email(token),
            extra={"legacy_shape": candidates[0].shape.value, "legacy_count": len(candidates)},
        )

        stored = await self._finish_cleanup(stored, [])
        return ReconciliationResult(
            ReconciliationOutcome.SLOW_SCAN_LEGACY,
            stored,
            legacy_count=len(candidates),
            removed_ids=superseded,
        )

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _migrate(self, token: str, candidate: RawDocument, superseded: Sequence[str]) -> Document:
        body = {k: v for k, v in candidate.document.items() if k not in SYSTEM_FIELDS}
        body["emails"] = candidate.addresses()
        body["email"] = token
        body["primaryEmail"] = token
        body["pendingCleanup"] = [doc_id for doc_id in superseded if doc_id != token]
        return normalize_profile(body, key=token)

    def _check_ambiguity(self, token: str, candidates: Sequence[RawDocument]) -> None:
        hashes = {
            c.document.get("nationalIdHash")
            for c in candidates
            if c.document.get("nationalIdHash")
        }
        if len(hashes) <= 1:
            return

        candidate_ids = [c.id for c in candidates]
        if self._strict:
            raise InconsistentIdentityError(mask_email(token), candidate_ids)
        logger.warning(
            f"Legacy documents for {mask_email(token)} disagree on national ID; keeping the first",
            candidate_count=len(candidate_ids),
        )

    async def _finish_cleanup(self, profile: Document, extra_ids: Sequence[str]) -> Document:
        """
        Delete superseded documents, then clear the profile's pendingCleanup.

        Deleting an id that is already gone is not an error, so this can be
        repeated safely after a partial failure.
        """
        key = profile["id"]
        pending = [doc_id for doc_id in profile.get("pendingCleanup") or [] if doc_id != key]
        to_delete = list(dict.fromkeys(pending + [doc_id for doc_id in extra_ids if doc_id != key]))

        for doc_id in to_delete:
            deleted = await self._store.delete(doc_id)
            if deleted:
                logger.log_business_event(
                    "duplicate_removed",
                    f"Removed superseded document for {mask_email(key)}",
                    entity_id=mask_email(key),
                )

        if not profile.get("pendingCleanup"):
            return profile

        cleared = normalize_profile({**profile, "pendingCleanup": []}, key=key)
        try:
            return await self._store.replace(cleared, if_match=profile.get("_etag"))
        except ConcurrencyConflictError:
            # Someone else wrote the profile meanwhile; their version wins.
            current = await self._store.read(key)
            return current if current is not None else profile
