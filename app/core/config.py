from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - SUPABASE_URL
      - SUPABASE_KEY (anon key)

    Optional:
      - DATABASE_URL (Supabase Postgres connection string; defaults to a
        local SQLite file for development)
      - SUPABASE_JWT_SECRET (verify access tokens locally; without it tokens
        are verified by asking Supabase Auth)
      - PROFILE_CACHE_TTL_SECONDS, RETRY_MAX_ATTEMPTS,
        RETRY_INITIAL_DELAY_SECONDS
    """

    PROJECT_NAME: str = "N-Sine Medical API"
    API_V1_STR: str = "/api/v1"

    # Supabase config
    SUPABASE_URL: str
    SUPABASE_KEY: str
    DATABASE_URL: str = "sqlite:///./n_sine_medical.db"

    # JWT verification (backend-side)
    SUPABASE_JWT_SECRET: str | None = None
    SUPABASE_JWT_ALG: str = "HS256"

    # Profile cache / retry tuning
    PROFILE_CACHE_TTL_SECONDS: float = 5 * 60
    RETRY_MAX_ATTEMPTS: int = 3
    RETRY_INITIAL_DELAY_SECONDS: float = 1.0

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.

    Raises a pydantic ValidationError when SUPABASE_URL or SUPABASE_KEY
    is missing, so the process fails at startup.
    """
    return Settings()
