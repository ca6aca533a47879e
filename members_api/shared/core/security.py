# 📄 File: members_api/shared/core/security.py
# 🧭 Purpose (Layman Explanation):
# Turns a member's national ID into a scrambled fingerprint so we can check for duplicates
# without writing the real number into database queries or logs.
# 🧪 Purpose (Technical Summary):
# Salted SHA-256 hasher for the sensitive identifier. The salt is injected through the
# constructor (sourced from Settings by the application factory).
# 🔗 Dependencies:
# hashlib
# 🔄 Connected Modules / Calls From:
# ProfileService (write path, uniqueness checks), application factory

import hashlib


class NationalIdHasher:
    """
    One-way salted hash for national IDs.

    The digest is ``sha256(digits + salt)`` in lowercase hex, matching the
    hashes already stored on existing profile documents.
    """

    def __init__(self, salt: str = ""):
        self._salt = salt or ""

    def hash(self, digits: str) -> str:
        """
        Hash a digits-only national ID.

        Args:
            digits: National ID with every non-digit already removed

        Returns:
            Hex digest
        """
        return hashlib.sha256(f"{digits}{self._salt}".encode("utf-8")).hexdigest()

    def __call__(self, digits: str) -> str:
        return self.hash(digits)
