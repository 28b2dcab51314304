"""Settings — verifies defaults and environment overrides.

Tests:
    - postgresql:// URLs rewritten for asyncpg
    - API prefix and log settings overridable from the environment
"""

from cmasapp.config import Settings


def test_postgres_url_rewritten_for_asyncpg():
    settings = Settings(database_url="postgresql://u:p@db:5432/users")

    assert settings.database_url == "postgresql+asyncpg://u:p@db:5432/users"


def test_sqlite_url_untouched():
    settings = Settings(database_url="sqlite+aiosqlite:///./x.db")

    assert settings.database_url == "sqlite+aiosqlite:///./x.db"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("API_PREFIX", "/v2/users")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    settings = Settings()

    assert settings.api_prefix == "/v2/users"
    assert settings.log_level == "DEBUG"
