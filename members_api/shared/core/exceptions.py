# 📄 File: members_api/shared/core/exceptions.py
# 🧭 Purpose (Layman Explanation):
# Defines the special error types the members service uses to say exactly what went wrong,
# like a missing email, a national ID someone else already registered, or a database outage.
# 🧪 Purpose (Technical Summary):
# Custom exception hierarchy providing specific error types with HTTP status codes,
# error details, and serialization for API responses. Details never carry raw national IDs.
# 🔗 Dependencies:
# FastAPI status codes, typing
# 🔄 Connected Modules / Calls From:
# Domain services, store adapters, API routers, application exception handler

from typing import Any, Dict, Optional
from fastapi import status


class MembersApiException(Exception):
    """
    Base exception class for the members service.
    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.error_code = error_code or self.__class__.__name__.upper()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format."""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
                "status_code": self.status_code
            }
        }


# =============================================================================
# IDENTITY & VALIDATION EXCEPTIONS
# =============================================================================

class MissingIdentityError(MembersApiException):
    """
    Raised when a profile payload carries neither an id nor an email.
    Always raised before any store I/O happens.
    """

    def __init__(self, message: str = "Profile requires an email or id"):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="MISSING_IDENTITY"
        )


class InvalidNationalIdError(MembersApiException):
    """Raised when a national ID does not have the expected number of digits."""

    def __init__(self, message: str = "Invalid national ID", digits: Optional[int] = None):
        details = {}
        if digits is not None:
            details["digits"] = digits

        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
            error_code="INVALID_NATIONAL_ID"
        )


class InvalidEmailError(MembersApiException):
    """Raised when a registration or login email is not a valid address."""

    def __init__(self, message: str = "Invalid email address"):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="INVALID_EMAIL"
        )


class InvalidReviewStatusError(MembersApiException):
    """Raised when a certificate review carries an unsupported status."""

    def __init__(self, review_status: str):
        super().__init__(
            message="Review status must be 'approved' or 'rejected'",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"status": review_status},
            error_code="INVALID_REVIEW_STATUS"
        )


# =============================================================================
# LOOKUP EXCEPTIONS
# =============================================================================

class NotFoundError(MembersApiException):
    """
    Exception raised when requested resource is not found.
    Lookups return None instead; this is for operations that need the resource.
    """

    def __init__(
        self,
        message: str = "Resource not found",
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if resource_type:
            details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id

        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details=details,
            error_code="NOT_FOUND"
        )


class ProfileNotFoundError(NotFoundError):
    """Raised when no profile exists for an identity token."""

    def __init__(self, identity: Optional[str] = None):
        super().__init__(
            message="Profile not found",
            resource_type="profile",
            resource_id=identity
        )


class CertificateNotFoundError(NotFoundError):
    """Raised when a certificate id is not on the profile's timeline."""

    def __init__(self, certificate_id: str):
        super().__init__(
            message="Certificate not found",
            resource_type="certificate",
            resource_id=certificate_id
        )


# =============================================================================
# CONFLICT EXCEPTIONS
# =============================================================================

class DuplicateClaimError(MembersApiException):
    """
    Raised when a national ID is already held by a different profile.

    Only the claimant's identity is exposed, never the raw national ID.
    """

    def __init__(self, claimant_id: str, claimant_email: Optional[str] = None):
        self.claimant_id = claimant_id
        self.claimant_email = claimant_email or claimant_id

        super().__init__(
            message="National ID already registered",
            status_code=status.HTTP_409_CONFLICT,
            details={"claimant_id": claimant_id},
            error_code="DUPLICATE_CLAIM"
        )


class InconsistentIdentityError(MembersApiException):
    """
    Raised when reconciliation cannot pick a single authoritative document.

    The current policy resolves ambiguity by taking the first candidate, so this
    is only raised by callers that opt into strict reconciliation.
    """

    def __init__(self, identity: str, candidate_ids: list):
        super().__init__(
            message="Multiple conflicting documents match this identity",
            status_code=status.HTTP_409_CONFLICT,
            details={"identity": identity, "candidate_ids": list(candidate_ids)},
            error_code="INCONSISTENT_IDENTITY"
        )


class ConcurrencyConflictError(MembersApiException):
    """Raised when a replace loses an optimistic-concurrency (etag) check."""

    def __init__(self, document_id: str):
        super().__init__(
            message="Profile was modified concurrently; reload and retry",
            status_code=status.HTTP_409_CONFLICT,
            details={"document_id": document_id},
            error_code="CONCURRENCY_CONFLICT"
        )


# =============================================================================
# INFRASTRUCTURE EXCEPTIONS
# =============================================================================

class StoreUnavailableError(MembersApiException):
    """
    Transient document store failure (network error, timeout, 5xx).
    Never retried inside the service; retry policy belongs to the caller.
    """

    def __init__(
        self,
        message: str = "Document store unavailable",
        operation: Optional[str] = None,
        original_error: Optional[str] = None
    ):
        details = {}
        if operation:
            details["operation"] = operation
        if original_error:
            details["original_error"] = original_error

        super().__init__(
            message=message,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            details=details,
            error_code="STORE_UNAVAILABLE"
        )
