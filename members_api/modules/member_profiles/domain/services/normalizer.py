# 📄 File: members_api/modules/member_profiles/domain/services/normalizer.py
# 🧭 Purpose (Layman Explanation):
# Takes whatever partial profile data arrives (from sign-up, an edit, or an old database record)
# and turns it into a complete profile with every field present, always in the same order.
# 🧪 Purpose (Technical Summary):
# Canonical schema normalizer: resolves the partition key, fills type-correct defaults for every
# known field, translates legacy enum labels and keeps unknown fields after the known ones.
# Deterministic key order lets two snapshots of the same person be compared field for field.
# 🔗 Dependencies:
# copy, typing, domain models, validators
# 🔄 Connected Modules / Calls From:
# ProfileService (create/merge), IdentityReconciler (migration), tests

import copy
from typing import Any, Callable, Dict, List, Optional, Tuple

from members_api.shared.core.exceptions import MissingIdentityError
from members_api.shared.utils.validators import normalize_identity
from ..models.profile import AccessLevel, CanonicalProfile, EventsPermission, utc_now_iso
from ..repositories.document_store import SYSTEM_FIELDS

_Default = Callable[[], Any]

# Known fields in canonical order. Identity fields (id, email, primaryEmail,
# emails) are resolved separately and always come first.
IDENTITY_FIELDS: Tuple[str, ...] = ("id", "email", "primaryEmail", "emails")

PROFILE_FIELDS: Tuple[Tuple[str, _Default], ...] = (
    ("createdVia", lambda: ""),
    ("createdAt", utc_now_iso),

    # registration
    ("name", lambda: ""),
    ("nickname", lambda: ""),
    ("rank", lambda: ""),
    ("nationalId", lambda: None),
    ("nationalIdHash", lambda: None),
    ("gender", lambda: ""),
    ("raceColor", lambda: ""),
    ("birthDate", lambda: ""),
    ("whatsapp", lambda: ""),
    ("emergencyContact", lambda: ""),
    ("address", lambda: ""),
    ("addressNumber", lambda: ""),
    ("trainingLocation", lambda: ""),
    ("trainingSchedule", lambda: ""),
    ("referenceTeacher", lambda: ""),
    ("groupStartDate", lambda: ""),

    # permissions / state
    ("accessLevel", lambda: AccessLevel.VISITOR.value),
    ("eventsPermission", lambda: EventsPermission.READER.value),
    ("termsAccepted", lambda: False),

    # certificates
    ("rankVerified", lambda: False),
    ("certificateTimeline", list),

    ("questionnaires", dict),
    ("pendingCleanup", list),
)

NULLABLE_FIELDS = frozenset({"nationalId", "nationalIdHash"})

KNOWN_FIELDS: Tuple[str, ...] = (
    IDENTITY_FIELDS + tuple(name for name, _ in PROFILE_FIELDS) + SYSTEM_FIELDS
)


def resolve_key(partial: Dict[str, Any]) -> str:
    """
    Canonical primary key for a partial record: the explicit id, else the
    email, trimmed and lower-cased.

    Raises:
        MissingIdentityError: If neither id nor email is usable
    """
    key = normalize_identity(partial.get("id")) or normalize_identity(partial.get("email"))
    if not key:
        raise MissingIdentityError()
    return key


def _email_history(partial: Dict[str, Any], email: str) -> List[str]:
    history: List[str] = []
    raw = partial.get("emails")
    candidates = list(raw) if isinstance(raw, list) else []
    candidates.append(partial.get("primaryEmail"))
    candidates.append(email)
    for value in candidates:
        if not isinstance(value, str):
            continue
        address = normalize_identity(value)
        if address and address not in history:
            history.append(address)
    return history


def normalize_profile(
    partial: Dict[str, Any],
    key: Optional[str] = None,
) -> CanonicalProfile:
    """
    Produce the complete canonical form of a partial profile.

    Args:
        partial: Any subset of profile fields, possibly from an older schema
        key: Forces the partition key (used when migrating or merging)

    Returns:
        New dict with identity fields first, then every known field (defaults
        filled in), then system fields if present, then unknown fields in
        their original order.

    Raises:
        MissingIdentityError: If the input carries neither id nor email and
            no key is forced
    """
    source = copy.deepcopy(partial or {})
    doc_id = normalize_identity(key) if key else resolve_key(source)

    email = normalize_identity(source.get("email")) or doc_id

    out: Dict[str, Any] = {
        "id": doc_id,
        "email": email,
        "primaryEmail": email,
        "emails": _email_history(source, email),
    }

    for name, default in PROFILE_FIELDS:
        value = source.get(name)
        if value is None and name not in NULLABLE_FIELDS:
            value = default()
        out[name] = value

    out["accessLevel"] = AccessLevel.coerce(out["accessLevel"])
    out["eventsPermission"] = EventsPermission.coerce(out["eventsPermission"])

    for name in SYSTEM_FIELDS:
        if source.get(name) is not None:
            out[name] = source[name]

    for name, value in source.items():
        if name not in out and name not in KNOWN_FIELDS:
            out[name] = value

    return out
