"""
Shared fixtures for the members API tests.

Everything runs against the in-memory document store; no Supabase project is
needed.
"""
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from members_api.main import create_application
from members_api.modules.member_profiles.domain.services.profile_service import ProfileService
from members_api.modules.member_profiles.infrastructure.store.memory_store import InMemoryDocumentStore
from members_api.shared.config.settings import Settings
from members_api.shared.core.security import NationalIdHasher

TEST_SALT = "test-salt"
REVIEWER = "reviewer@example.com"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        ENVIRONMENT="test",
        STORE_BACKEND="memory",
        NATIONAL_ID_HASH_SALT=TEST_SALT,
        CERTIFICATE_REVIEWER=REVIEWER,
        LOG_FORMAT="text",
    )


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def hasher() -> NationalIdHasher:
    return NationalIdHasher(TEST_SALT)


@pytest.fixture
def service(store: InMemoryDocumentStore, hasher: NationalIdHasher) -> ProfileService:
    return ProfileService(store, hasher, reviewer=REVIEWER)


@pytest_asyncio.fixture
async def client(settings: Settings, store: InMemoryDocumentStore):
    """Async httpx client using ASGI transport, no live server needed."""
    app = create_application(settings=settings, store=store)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
