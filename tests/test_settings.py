"""
Tests for settings validation.
"""
import pytest
from pydantic import ValidationError

from members_api.shared.config.settings import Settings


def test_defaults_use_memory_backend():
    settings = Settings(_env_file=None)

    assert settings.STORE_BACKEND == "memory"
    assert settings.PROFILES_TABLE == "usuarios"
    assert settings.CERTIFICATE_REVIEWER == "contato@capoeiraminasbahia.com.br"


def test_values_are_normalized():
    settings = Settings(_env_file=None, STORE_BACKEND="MEMORY", LOG_LEVEL="debug", LOG_FORMAT="TEXT")

    assert settings.STORE_BACKEND == "memory"
    assert settings.LOG_LEVEL == "DEBUG"
    assert settings.LOG_FORMAT == "text"


@pytest.mark.parametrize("overrides", [
    {"STORE_BACKEND": "cosmos"},
    {"LOG_FORMAT": "xml"},
    {"ENVIRONMENT": "qa"},
    {"CORS_ORIGINS": "localhost:5173"},
])
def test_invalid_values_are_rejected(overrides):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **overrides)


def test_supabase_backend_requires_credentials():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, STORE_BACKEND="supabase")

    settings = Settings(
        _env_file=None,
        STORE_BACKEND="supabase",
        SUPABASE_URL="https://project.supabase.co",
        SUPABASE_SERVICE_ROLE_KEY="service-key",
    )
    assert settings.STORE_BACKEND == "supabase"


def test_cors_origins_list():
    settings = Settings(_env_file=None, CORS_ORIGINS="http://localhost:5173, https://example.com")

    assert settings.cors_origins_list == ["http://localhost:5173", "https://example.com"]
