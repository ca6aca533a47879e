# 📄 File: members_api/modules/member_profiles/presentation/api/schemas/profile_schemas.py
# 🧭 Purpose (Layman Explanation):
# Describes what the app sends when saving a profile, submitting a rank certificate or
# reviewing one, and what the server answers back.
# 🧪 Purpose (Technical Summary):
# Pydantic v2 request/response schemas for the profile endpoints. Profile bodies allow extra
# fields because profiles are open documents; the normalizer owns their final shape.
# 🔗 Dependencies:
# pydantic
# 🔄 Connected Modules / Calls From:
# members_api.modules.member_profiles.presentation.api.v1.profiles

from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ProfilePayload(BaseModel):
    """
    Profile body for registration and updates.

    Only the identity and national ID fields are declared; everything else is
    passed through to the normalizer unchanged.
    """
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = Field(None, description="Canonical id (the email)")
    email: Optional[str] = Field(None, description="Member email")
    nationalId: Optional[str] = Field(None, description="National ID, any punctuation")

    def to_partial(self) -> Dict[str, Any]:
        """Fields the client actually sent."""
        return self.model_dump(exclude_unset=True)


class CertificateSubmission(BaseModel):
    """A rank certificate sent by the member for review."""
    model_config = ConfigDict(extra="allow")

    rank: str = Field(..., min_length=1, description="Rank the certificate attests")


class CertificateReviewRequest(BaseModel):
    """Admin decision on a submitted certificate."""
    model_config = ConfigDict(populate_by_name=True)

    status: str = Field(..., description="approved or rejected")
    note: str = Field(
        default="",
        validation_alias=AliasChoices("note", "observacao"),
        description="Reviewer note"
    )
    update_rank: bool = Field(
        default=False,
        validation_alias=AliasChoices("updateRank", "update_rank", "atualizarCorda"),
        description="Copy the certificate rank onto the profile when approved"
    )


class NationalIdCheckResponse(BaseModel):
    exists: bool


class AcknowledgementResponse(BaseModel):
    ok: bool = True
