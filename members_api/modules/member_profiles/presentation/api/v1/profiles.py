# 📄 File: members_api/modules/member_profiles/presentation/api/v1/profiles.py
# 🧭 Purpose (Layman Explanation):
# The web addresses the member app and the admin panel call to read and save profiles,
# check whether a national ID is already registered, and submit or review rank certificates.
#
# 🧪 Purpose (Technical Summary):
# FastAPI router for /perfil. Thin handlers delegating to ProfileService; domain errors
# propagate as MembersApiException and are rendered by the application exception handler.
#
# 🔗 Dependencies:
# - FastAPI router, Depends, Header, Query
# - members_api.modules.member_profiles.presentation.api.schemas.profile_schemas
# - members_api.modules.member_profiles.presentation.dependencies
#
# 🔄 Connected Modules / Calls From:
# - members_api.api.v1.router (router inclusion)
# - Member registration and self-service profile pages
# - Admin certificate review panel

"""
Profiles API Endpoints

Endpoints:
- GET /perfil: List all profiles (administrative)
- GET /perfil/__check/exists-cpf: Is a national ID already registered? (fails open)
- GET /perfil/__admin/pendentes: Pending certificates across all profiles
- POST /perfil: Registration (201 when created, 200 when it already existed)
- PUT /perfil/self: Self-service update, identity taken from the body
- GET /perfil/{email}: Canonical profile for an email
- PUT /perfil/{email}: Merge an update into the profile
- GET /perfil/{email}/certificados: Certificate timeline
- POST /perfil/{email}/certificados: Submit a certificate
- PUT /perfil/{email}/certificados/{certificate_id}: Approve or reject a certificate

Literal paths are declared before /{email} so they are not captured by it.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Header, Query, Response, status

from members_api.shared.core.exceptions import MissingIdentityError
from ...dependencies import get_profile_service
from ....domain.services.profile_service import ProfileService
from ..schemas.profile_schemas import (
    AcknowledgementResponse,
    CertificateReviewRequest,
    CertificateSubmission,
    NationalIdCheckResponse,
    ProfilePayload,
)

profiles_router = APIRouter()


@profiles_router.get(
    "",
    response_model=List[Dict[str, Any]],
    summary="List profiles",
    description="Every stored profile document (administrative use)",
)
async def list_profiles(
    service: ProfileService = Depends(get_profile_service),
) -> List[Dict[str, Any]]:
    return await service.list_profiles()


@profiles_router.get(
    "/__check/exists-cpf",
    response_model=NationalIdCheckResponse,
    summary="Check national ID availability",
    description="Whether a national ID (or its salted hash) is already registered",
)
async def check_national_id(
    cpf: str = Query("", description="National ID, any punctuation"),
    national_id_hash: str = Query("", alias="hash", description="Salted national ID hash"),
    service: ProfileService = Depends(get_profile_service),
) -> NationalIdCheckResponse:
    """
    Pre-submit availability check used by the registration form.

    Invalid input answers ``exists: false``; so does a store failure, since
    the write path re-checks and fails closed.
    """
    cpf = cpf.strip()
    national_id_hash = national_id_hash.strip()

    if cpf:
        claimant = await service.check_unique(cpf)
    elif national_id_hash:
        claimant = await service.check_unique_hash(national_id_hash)
    else:
        claimant = None

    return NationalIdCheckResponse(exists=claimant is not None)


@profiles_router.get(
    "/__admin/pendentes",
    response_model=List[Dict[str, Any]],
    summary="Pending certificates",
    description="Certificates awaiting review across all profiles",
)
async def list_pending_certificates(
    service: ProfileService = Depends(get_profile_service),
) -> List[Dict[str, Any]]:
    return await service.list_pending_certificates()


@profiles_router.post(
    "",
    response_model=Dict[str, Any],
    status_code=status.HTTP_201_CREATED,
    summary="Register profile",
    responses={
        200: {"description": "Profile already existed and was overwritten"},
        201: {"description": "Profile created"},
        400: {"description": "Missing email or invalid national ID"},
        409: {"description": "National ID already registered to another member"},
    },
)
async def register_profile(
    payload: ProfilePayload,
    response: Response,
    service: ProfileService = Depends(get_profile_service),
) -> Dict[str, Any]:
    profile, created = await service.register(payload.to_partial())
    if not created:
        response.status_code = status.HTTP_200_OK
    return profile


@profiles_router.put(
    "/self",
    response_model=Dict[str, Any],
    summary="Update own profile",
    description="Self-service update; the member's email comes from the body",
)
async def update_own_profile(
    payload: ProfilePayload,
    service: ProfileService = Depends(get_profile_service),
) -> Dict[str, Any]:
    email = payload.email or payload.id
    if not email:
        raise MissingIdentityError()
    return await service.update(email, payload.to_partial())


@profiles_router.get(
    "/{email}",
    response_model=Dict[str, Any],
    summary="Get profile",
    responses={404: {"description": "Profile not found"}},
)
async def get_profile(
    email: str,
    service: ProfileService = Depends(get_profile_service),
) -> Dict[str, Any]:
    return await service.get(email)


@profiles_router.put(
    "/{email}",
    response_model=Dict[str, Any],
    summary="Update profile",
    responses={
        409: {"description": "National ID conflict or profile changed since it was read"},
    },
)
async def update_profile(
    email: str,
    payload: ProfilePayload,
    if_match: Optional[str] = Header(None, description="Etag the client last saw"),
    service: ProfileService = Depends(get_profile_service),
) -> Dict[str, Any]:
    return await service.update(email, payload.to_partial(), if_match=if_match)


@profiles_router.get(
    "/{email}/certificados",
    response_model=List[Dict[str, Any]],
    summary="Certificate timeline",
)
async def list_certificates(
    email: str,
    service: ProfileService = Depends(get_profile_service),
) -> List[Dict[str, Any]]:
    return await service.list_certificates(email)


@profiles_router.post(
    "/{email}/certificados",
    response_model=Dict[str, Any],
    status_code=status.HTTP_201_CREATED,
    summary="Submit certificate",
)
async def submit_certificate(
    email: str,
    submission: CertificateSubmission,
    service: ProfileService = Depends(get_profile_service),
) -> Dict[str, Any]:
    return await service.append_certificate(email, submission.model_dump())


@profiles_router.put(
    "/{email}/certificados/{certificate_id}",
    response_model=AcknowledgementResponse,
    summary="Review certificate",
    responses={
        400: {"description": "Status must be approved or rejected"},
        404: {"description": "Profile or certificate not found"},
    },
)
async def review_certificate(
    email: str,
    certificate_id: str,
    review: CertificateReviewRequest,
    service: ProfileService = Depends(get_profile_service),
) -> AcknowledgementResponse:
    await service.review_certificate(
        email,
        certificate_id,
        review.status,
        note=review.note,
        update_rank=review.update_rank,
    )
    return AcknowledgementResponse()
