# 📄 File: members_api/main.py
#
# 🧭 Purpose (Layman Explanation):
# Starts the members service, picks which database to talk to, and connects the
# web addresses for profiles and health checks.
#
# 🧪 Purpose (Technical Summary):
# FastAPI application factory and entry point: settings-driven store selection
# (in-memory or Supabase), ProfileService wiring on app.state, request-ID logging middleware,
# CORS, router registration and the MembersApiException handler.
#
# 🔗 Dependencies:
# - FastAPI framework, uvicorn
# - members_api.shared.config.settings
# - members_api.modules.member_profiles (service and store adapters)
#
# 🔄 Connected Modules / Calls From:
# - uvicorn server startup
# - Test suite (create_application with an injected store)

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from members_api.api.v1.router import api_v1_router
from members_api.modules.member_profiles.domain.repositories.document_store import DocumentStore
from members_api.modules.member_profiles.domain.services.profile_service import ProfileService
from members_api.modules.member_profiles.infrastructure.store.memory_store import InMemoryDocumentStore
from members_api.modules.member_profiles.infrastructure.store.supabase_store import SupabaseDocumentStore
from members_api.shared.config.settings import Settings, get_settings
from members_api.shared.config.supabase import SupabaseManager
from members_api.shared.core.exceptions import MembersApiException
from members_api.shared.core.security import NationalIdHasher
from members_api.shared.utils.logging import get_logger, log_context, setup_logging

logger = get_logger(__name__)


def build_store(settings: Settings) -> DocumentStore:
    """Document store selected by STORE_BACKEND."""
    if settings.STORE_BACKEND == "supabase":
        return SupabaseDocumentStore(SupabaseManager(settings), table=settings.PROFILES_TABLE)
    return InMemoryDocumentStore()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Configures logging on startup and releases the store client on shutdown.
    """
    settings: Settings = app.state.settings
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    logger.info(
        f"{settings.APP_NAME} starting up",
        environment=settings.ENVIRONMENT,
        store_backend=settings.STORE_BACKEND,
    )
    if not settings.NATIONAL_ID_HASH_SALT:
        logger.warning("NATIONAL_ID_HASH_SALT is empty; national ID hashes are unsalted")

    yield

    store = app.state.store
    if isinstance(store, SupabaseDocumentStore):
        await store.close()
    logger.info(f"{settings.APP_NAME} shut down")


def create_application(
    settings: Optional[Settings] = None,
    store: Optional[DocumentStore] = None
) -> FastAPI:
    """
    Application factory function.

    Args:
        settings: Settings to use (defaults to environment settings)
        store: Document store to use (defaults to the one STORE_BACKEND selects)

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or get_settings()
    store = store if store is not None else build_store(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan,
        debug=settings.DEBUG,
    )

    app.state.settings = settings
    app.state.store = store
    app.state.profile_service = ProfileService(
        store,
        NationalIdHasher(settings.NATIONAL_ID_HASH_SALT),
        reviewer=settings.CERTIFICATE_REVIEWER,
    )

    # =========================================================================
    # MIDDLEWARE CONFIGURATION
    # =========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "ETag"],
    )

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        with log_context(request.headers.get("X-Request-ID")) as request_id:
            request.state.request_id = request_id
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response

    # =========================================================================
    # ROUTER REGISTRATION
    # =========================================================================

    app.include_router(api_v1_router)

    # =========================================================================
    # EXCEPTION HANDLERS
    # =========================================================================

    @app.exception_handler(MembersApiException)
    async def members_api_exception_handler(
        request: Request,
        exc: MembersApiException
    ) -> JSONResponse:
        """Render domain errors with their HTTP status."""
        if exc.status_code >= 500:
            logger.error(f"{exc.error_code} on {request.url.path}: {exc.message}")
        content = exc.to_dict()
        content["error"]["request_id"] = getattr(request.state, "request_id", None)
        return JSONResponse(status_code=exc.status_code, content=content)

    return app


def main():
    """Run the application with uvicorn in development."""
    settings = get_settings()
    uvicorn.run(
        "members_api.main:create_application",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
