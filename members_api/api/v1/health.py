# 📄 File: members_api/api/v1/health.py
# 🧭 Purpose (Layman Explanation):
# Tells load balancers and operators whether the members service is up and can reach its database.
# 🧪 Purpose (Technical Summary):
# Health check endpoints: a static liveness probe and a readiness probe that pings the
# document store through ProfileService.health_check().
# 🔗 Dependencies:
# FastAPI, ProfileService (application settings on app.state)
# 🔄 Connected Modules / Calls From:
# members_api.api.v1.router, members_api.main, monitoring systems, load balancers

from datetime import datetime

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from members_api.modules.member_profiles.domain.services.profile_service import ProfileService
from members_api.modules.member_profiles.presentation.dependencies import get_profile_service
from members_api.shared.utils.logging import get_logger

logger = get_logger(__name__)

health_router = APIRouter()


@health_router.get("/health",
                   summary="Basic Health Check",
                   description="Liveness check for load balancers",
                   tags=["Health Check"])
async def health_check(request: Request) -> JSONResponse:
    """Simple OK status; does not touch the store."""
    settings = request.app.state.settings
    return JSONResponse(
        status_code=200,
        content={
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
            "service": "members-api",
            "version": settings.APP_VERSION,
        }
    )


@health_router.get("/health/ready",
                   summary="Readiness Check",
                   description="Checks that the document store is reachable",
                   tags=["Health Check"])
async def readiness_check(
    service: ProfileService = Depends(get_profile_service),
) -> JSONResponse:
    components = await service.health_check()
    ready = all(state == "healthy" for state in components.values())
    if not ready:
        logger.warning("Readiness check failed", components=components)

    return JSONResponse(
        status_code=200 if ready else 503,
        content={
            "status": "ready" if ready else "not_ready",
            "timestamp": datetime.now().isoformat(),
            "components": components,
        }
    )
