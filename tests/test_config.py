import pytest
from pydantic import ValidationError

from app.core.config import Settings


def test_missing_supabase_settings_fail_fast(monkeypatch):
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_KEY", raising=False)

    with pytest.raises(ValidationError) as exc_info:
        Settings(_env_file=None)

    missing = {error["loc"][0] for error in exc_info.value.errors()}
    assert {"SUPABASE_URL", "SUPABASE_KEY"} <= missing


def test_defaults(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://abc.supabase.co")
    monkeypatch.setenv("SUPABASE_KEY", "anon")
    monkeypatch.delenv("PROFILE_CACHE_TTL_SECONDS", raising=False)
    monkeypatch.delenv("RETRY_MAX_ATTEMPTS", raising=False)
    monkeypatch.delenv("RETRY_INITIAL_DELAY_SECONDS", raising=False)

    settings = Settings(_env_file=None)

    assert settings.PROFILE_CACHE_TTL_SECONDS == 300
    assert settings.RETRY_MAX_ATTEMPTS == 3
    assert settings.RETRY_INITIAL_DELAY_SECONDS == 1.0
