# 📄 File: members_api/shared/core/__init__.py
# 🧭 Purpose (Layman Explanation):
# The shared building blocks every part of the service relies on: error types and hashing.
# 🧪 Purpose (Technical Summary):
# Core package exports for the exception hierarchy and the national ID hasher.

from .exceptions import (
    MembersApiException,
    MissingIdentityError,
    InvalidNationalIdError,
    InvalidEmailError,
    InvalidReviewStatusError,
    NotFoundError,
    ProfileNotFoundError,
    CertificateNotFoundError,
    DuplicateClaimError,
    InconsistentIdentityError,
    ConcurrencyConflictError,
    StoreUnavailableError,
)
from .security import NationalIdHasher

__all__ = [
    "MembersApiException",
    "MissingIdentityError",
    "InvalidNationalIdError",
    "InvalidEmailError",
    "InvalidReviewStatusError",
    "NotFoundError",
    "ProfileNotFoundError",
    "CertificateNotFoundError",
    "DuplicateClaimError",
    "InconsistentIdentityError",
    "ConcurrencyConflictError",
    "StoreUnavailableError",
    "NationalIdHasher",
]
