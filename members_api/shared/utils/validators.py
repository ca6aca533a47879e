# 📄 File: members_api/shared/utils/validators.py
# 🧭 Purpose (Layman Explanation):
# Small checkers that clean up and verify what members type in, like stripping
# punctuation from a national ID or making sure an email address looks right.
# 🧪 Purpose (Technical Summary):
# Normalization and validation helpers for identity tokens (email) and the sensitive
# identifier (national ID), returning ValidationResult objects like the rest of the app.
# 🔗 Dependencies:
# - re: digit extraction
# - email-validator: email syntax validation
# 🔄 Connected Modules / Calls From:
# ProfileService (registration, updates, uniqueness checks), API routers

import re
from typing import Any, List, Optional

from email_validator import validate_email, EmailNotValidError

NATIONAL_ID_LENGTH = 11
NON_DIGIT_PATTERN = re.compile(r'\D')


class ValidationResult:
    """Result object for validation operations"""
    def __init__(self, is_valid: bool, errors: List[str] = None, value: Any = None):
        self.is_valid = is_valid
        self.errors = errors or []
        self.value = value

    def add_error(self, error: str):
        """Add validation error"""
        self.errors.append(error)
        self.is_valid = False

    @property
    def error_message(self) -> str:
        return "; ".join(self.errors)


# ==============================================================================
# IDENTITY TOKENS
# ==============================================================================

def normalize_identity(token: Optional[str]) -> str:
    """Trim and lower-case an identity token (email or document id)."""
    if token is None:
        return ""
    return str(token).strip().lower()


def validate_email_address(email: str) -> ValidationResult:
    """
    Validate email address syntax (no deliverability lookup).

    Args:
        email: Email address to validate

    Returns:
        ValidationResult whose value is the normalized address
    """
    result = ValidationResult(True)

    if not email or not isinstance(email, str):
        result.add_error("Email address is required")
        return result

    try:
        validated = validate_email(email.strip(), check_deliverability=False)
        result.value = validated.normalized.lower()
    except EmailNotValidError as e:
        result.add_error(f"Invalid email address: {e}")

    return result


# ==============================================================================
# NATIONAL ID
# ==============================================================================

def normalize_national_id(raw: Any) -> str:
    """Keep only the digits of a national ID."""
    if raw is None:
        return ""
    return NON_DIGIT_PATTERN.sub("", str(raw))


def validate_national_id(raw: Any) -> ValidationResult:
    """
    Validate a national ID: after removing punctuation it must have 11 digits.

    The error messages never echo the submitted value.
    """
    digits = normalize_national_id(raw)
    result = ValidationResult(True, value=digits)

    if len(digits) != NATIONAL_ID_LENGTH:
        result.add_error(f"National ID must have {NATIONAL_ID_LENGTH} digits")

    return result
