"""Logging and validation helpers."""

from .logging import get_logger, setup_logging, mask_email, log_context
from .validators import (
    ValidationResult,
    normalize_identity,
    normalize_national_id,
    validate_email_address,
    validate_national_id,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "mask_email",
    "log_context",
    "ValidationResult",
    "normalize_identity",
    "normalize_national_id",
    "validate_email_address",
    "validate_national_id",
]
