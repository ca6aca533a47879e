"""
Domain models for member profiles.
"""

from .profile import (
    AccessLevel,
    CanonicalProfile,
    CertificateEntry,
    CertificateReview,
    CertificateStatus,
    Claimant,
    EventsPermission,
    utc_now_iso,
)
from .document_shapes import DocumentShape, RawDocument, classify_document

__all__ = [
    "AccessLevel",
    "CanonicalProfile",
    "CertificateEntry",
    "CertificateReview",
    "CertificateStatus",
    "Claimant",
    "EventsPermission",
    "utc_now_iso",
    "DocumentShape",
    "RawDocument",
    "classify_document",
]
