from .profile_schemas import (
    AcknowledgementResponse,
    CertificateReviewRequest,
    CertificateSubmission,
    NationalIdCheckResponse,
    ProfilePayload,
)

__all__ = [
    "AcknowledgementResponse",
    "CertificateReviewRequest",
    "CertificateSubmission",
    "NationalIdCheckResponse",
    "ProfilePayload",
]
