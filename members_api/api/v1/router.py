# 📄 File: members_api/api/v1/router.py
# 🧭 Purpose (Layman Explanation):
# Gathers every group of web addresses (health checks, profiles) into one place the app can plug in.
# 🧪 Purpose (Technical Summary):
# API v1 router aggregation: health routes without prefix, profile routes under /perfil.
# 🔗 Dependencies:
# FastAPI, members_api.api.v1.health, member_profiles presentation router
# 🔄 Connected Modules / Calls From:
# members_api.main

from fastapi import APIRouter

from members_api.modules.member_profiles.presentation.api.v1.profiles import profiles_router
from .health import health_router

api_v1_router = APIRouter()

# Health check router (no prefix - direct access)
api_v1_router.include_router(
    health_router,
    tags=["Health Check"]
)

api_v1_router.include_router(
    profiles_router,
    prefix="/perfil",
    tags=["Profiles"]
)
