"""
Raw document shapes found in the profiles container.

Profiles have been written under several id schemes over time. The
reconciliation engine is the only consumer of these shapes; everything else
sees normalized canonical profiles.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List

from members_api.shared.utils.validators import normalize_identity


class DocumentShape(str, Enum):
    """How a stored document encodes the identity it was matched on."""
    CANONICAL = "canonical"                      # id is the identity token
    EMAIL_KEYED = "email_keyed"                  # opaque id, token in `email`
    PRIMARY_EMAIL_KEYED = "primary_email_keyed"  # opaque id, token in `primaryEmail`
    EMAIL_HISTORY = "email_history"              # token only listed in `emails`


@dataclass(frozen=True)
class RawDocument:
    shape: DocumentShape
    document: Dict[str, Any]

    @property
    def id(self) -> str:
        return str(self.document.get("id", ""))

    @property
    def is_canonical(self) -> bool:
        return self.shape is DocumentShape.CANONICAL

    def addresses(self) -> List[str]:
        """Every email address the document knows about, normalized, in order."""
        found: List[str] = []
        candidates = [self.document.get("primaryEmail"), self.document.get("email")]
        history = self.document.get("emails")
        if isinstance(history, list):
            candidates.extend(history)
        for value in candidates:
            address = normalize_identity(value) if isinstance(value, str) else ""
            if address and "@" in address and address not in found:
                found.append(address)
        return found


def _history_contains(document: Dict[str, Any], token: str) -> bool:
    history = document.get("emails")
    if not isinstance(history, list):
        return False
    return any(isinstance(item, str) and normalize_identity(item) == token for item in history)


def classify_document(document: Dict[str, Any], token: str) -> RawDocument:
    """
    Tag a document matched by the slow scan with its shape.

    Args:
        document: Raw document as returned by the store
        token: Normalized identity token the scan was run for

    Returns:
        RawDocument tagged with the shape that matched
    """
    if document.get("id") == token:
        shape = DocumentShape.CANONICAL
    elif normalize_identity(document.get("email")) == token:
        shape = DocumentShape.EMAIL_KEYED
    elif normalize_identity(document.get("primaryEmail")) == token:
        shape = DocumentShape.PRIMARY_EMAIL_KEYED
    elif _history_contains(document, token):
        shape = DocumentShape.EMAIL_HISTORY
    else:
        # The store matched on the id with different casing.
        shape = DocumentShape.EMAIL_KEYED
    return RawDocument(shape=shape, document=document)
