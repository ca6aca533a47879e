# 📄 File: members_api/modules/member_profiles/domain/services/uniqueness.py
# 🧭 Purpose (Layman Explanation):
# Checks whether some other member already registered a national ID, using a scrambled
# fingerprint of the number instead of the number itself wherever possible.
# 🧪 Purpose (Technical Summary):
# Best-effort secondary uniqueness for nationalIdHash over a store without unique indexes or
# cross-partition transactions: probe by hash, fall back to the raw digits only when no hash
# is given, plus an after-the-fact sweep reporting hashes held by more than one document.
# 🔗 Dependencies:
# Document store port, domain models, structured logging
# 🔄 Connected Modules / Calls From:
# ProfileService (create/merge/check_unique), admin tooling

"""
Known weakness: the probe is a check-then-act. Two writers claiming the same
national ID concurrently can both see "no claimant" before either commits.
find_duplicate_claims() exists so such races can be detected and resolved
afterwards.
"""

from collections import defaultdict
from typing import Dict, List, Optional

from members_api.shared.core.exceptions import StoreUnavailableError
from members_api.shared.utils.logging import get_logger
from ..models.profile import Claimant
from ..repositories.document_store import DocumentStore, FieldMatch

logger = get_logger(__name__)

# Enough rows to see a second holder when a race already produced one.
CLAIMANT_LIMIT = 5


class NationalIdProbe:
    """Looks up which profile, if any, already holds a national ID."""

    def __init__(self, store: DocumentStore):
        self._store = store

    async def probe(
        self,
        national_id_hash: Optional[str],
        digits: Optional[str] = None,
        fail_open: bool = False,
    ) -> Optional[Claimant]:
        """First profile claiming the national ID, or None. See claimants()."""
        found = await self.claimants(national_id_hash, digits, limit=1, fail_open=fail_open)
        return found[0] if found else None

    async def claimants(
        self,
        national_id_hash: Optional[str],
        digits: Optional[str] = None,
        limit: int = CLAIMANT_LIMIT,
        fail_open: bool = False,
    ) -> List[Claimant]:
        """
        Profiles claiming the national ID, in id order.

        Args:
            national_id_hash: Salted hash of the digits (preferred key)
            digits: Raw digits, only queried when no hash is given
            limit: Maximum number of claimants to fetch
            fail_open: On store failure return no claimants instead of raising.
                Read-side checks pass True, write paths keep the default.

        Returns:
            Up to ``limit`` claimants (more than one means an earlier race)

        Raises:
            StoreUnavailableError: When the store fails and fail_open is False
        """
        if national_id_hash:
            match = FieldMatch("nationalIdHash", national_id_hash)
        elif digits:
            match = FieldMatch("nationalId", digits)
        else:
            return []

        try:
            rows = await self._store.query_any([match], limit=limit)
        except StoreUnavailableError:
            if fail_open:
                logger.warning(
                    "National ID probe failed; allowing (fail open)",
                    probe_field=match.field,
                )
                return []
            raise

        return [
            Claimant(id=str(row.get("id", "")), email=str(row.get("email") or row.get("id", "")))
            for row in rows
        ]

    async def find_duplicate_claims(self) -> Dict[str, List[str]]:
        """
        Sweep every document and report national ID hashes held by more than
        one profile.

        Returns:
            Mapping of hash -> sorted list of document ids claiming it
        """
        holders: Dict[str, List[str]] = defaultdict(list)
        for document in await self._store.list_all():
            national_id_hash = document.get("nationalIdHash")
            if national_id_hash:
                holders[national_id_hash].append(str(document.get("id", "")))

        duplicates = {h: sorted(ids) for h, ids in holders.items() if len(ids) > 1}
        if duplicates:
            logger.warning(
                f"Found {len(duplicates)} national ID hashes claimed by several profiles",
                duplicate_hashes=len(duplicates),
            )
        return duplicates
