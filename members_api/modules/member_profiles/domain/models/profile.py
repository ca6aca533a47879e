# 📄 File: members_api/modules/member_profiles/domain/models/profile.py
# 🧭 Purpose (Layman Explanation):
# Describes what a member profile holds: who the member is, their rank and access level,
# and the list of rank certificates they sent in for review.
# 🧪 Purpose (Technical Summary):
# Domain value types for the canonical profile document: ordered access-level enum,
# events permission, certificate timeline entries (pydantic) and the uniqueness claimant.
# 🔗 Dependencies:
# pydantic, datetime, enum, uuid, dataclasses
# 🔄 Connected Modules / Calls From:
# normalizer.py, uniqueness.py, profile_service.py, API schemas

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

# Profiles travel as plain JSON documents; this alias marks ones that went
# through the normalizer.
CanonicalProfile = Dict[str, Any]


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string, the format stored on documents."""
    return datetime.now(timezone.utc).isoformat()


class AccessLevel(str, Enum):
    """Member access levels, lowest first."""
    VISITOR = "visitor"
    STUDENT = "student"
    GRADUATE = "graduate"
    MONITOR = "monitor"
    INSTRUCTOR = "instructor"
    TEACHER = "teacher"
    ELDER = "elder"

    @property
    def rank(self) -> int:
        return list(AccessLevel).index(self)

    def at_least(self, other: "AccessLevel") -> bool:
        """True when this level is equal to or above ``other``."""
        return self.rank >= AccessLevel(other).rank

    @classmethod
    def coerce(cls, value: Any) -> Any:
        """
        Map a stored value onto the enum, translating the Portuguese labels
        written by older clients. Unknown values are returned untouched.
        """
        if isinstance(value, cls):
            return value.value
        if not isinstance(value, str):
            return value
        key = value.strip().lower()
        if key in cls._value2member_map_:
            return key
        return LEGACY_ACCESS_LEVELS.get(key, value)


class EventsPermission(str, Enum):
    """Permission over the events calendar."""
    READER = "reader"
    EDITOR = "editor"

    @classmethod
    def coerce(cls, value: Any) -> Any:
        if isinstance(value, cls):
            return value.value
        if not isinstance(value, str):
            return value
        key = value.strip().lower()
        if key in cls._value2member_map_:
            return key
        return LEGACY_EVENTS_PERMISSIONS.get(key, value)


LEGACY_ACCESS_LEVELS = {
    "visitante": AccessLevel.VISITOR.value,
    "aluno": AccessLevel.STUDENT.value,
    "graduado": AccessLevel.GRADUATE.value,
    "monitor": AccessLevel.MONITOR.value,
    "instrutor": AccessLevel.INSTRUCTOR.value,
    "professor": AccessLevel.TEACHER.value,
    "contramestre": AccessLevel.ELDER.value,
    "mestre": AccessLevel.ELDER.value,
}

LEGACY_EVENTS_PERMISSIONS = {
    "leitor": EventsPermission.READER.value,
    "editor": EventsPermission.EDITOR.value,
}


class CertificateStatus(str, Enum):
    """Review status of a submitted rank certificate"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class CertificateReview(BaseModel):
    """Reviewer decision recorded on a certificate entry."""

    model_config = ConfigDict(populate_by_name=True)

    by: str
    at: str = Field(default_factory=utc_now_iso)
    note: str = ""


class CertificateEntry(BaseModel):
    """
    One entry of a profile's certificate timeline.

    Submitters may attach extra fields (file URL, issuing date...); they are
    kept as-is alongside the known ones.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow", use_enum_values=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    rank: str = ""
    status: CertificateStatus = CertificateStatus.PENDING
    submitted_at: str = Field(default_factory=utc_now_iso, alias="submittedAt")
    review: Optional[CertificateReview] = None

    def to_document(self) -> Dict[str, Any]:
        """Serialize with the camelCase keys used on stored documents."""
        return self.model_dump(by_alias=True)


@dataclass(frozen=True)
class Claimant:
    """Profile currently holding a national ID hash."""
    id: str
    email: str
