# 📄 File: members_api/modules/member_profiles/presentation/dependencies.py
# 🧭 Purpose (Layman Explanation):
# Hands each profile endpoint the shared profile service so it can do its work.
# 🧪 Purpose (Technical Summary):
# FastAPI dependencies resolving the ProfileService built by the application factory.
# 🔗 Dependencies:
# FastAPI Request, ProfileService
# 🔄 Connected Modules / Calls From:
# members_api.modules.member_profiles.presentation.api.v1.profiles

from fastapi import Request

from ..domain.services.profile_service import ProfileService


def get_profile_service(request: Request) -> ProfileService:
    """ProfileService attached to the running application."""
    return request.app.state.profile_service
