"""
Domain services for member profiles.
"""

from .normalizer import normalize_profile, resolve_key
from .uniqueness import NationalIdProbe
from .resolver import PointLookupResolver
from .reconciliation import IdentityReconciler, ReconciliationOutcome, ReconciliationResult
from .profile_service import ProfileService

__all__ = [
    "normalize_profile",
    "resolve_key",
    "NationalIdProbe",
    "PointLookupResolver",
    "IdentityReconciler",
    "ReconciliationOutcome",
    "ReconciliationResult",
    "ProfileService",
]
