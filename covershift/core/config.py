# covershift/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - SUPABASE_URL
      - SUPABASE_KEY (anon key)
      - DATABASE_URL (Supabase Postgres connection string)
      - SUPABASE_JWT_SECRET (JWT signing secret from Supabase project settings)

    Optional:
      - SUPABASE_SERVICE_ROLE_KEY (admin Auth lookups + Storage uploads)
      - APP_ORIGIN (front-end origin used in email links)
      - DECLINE_REOPENS_JOB (decline puts the job back to "open")
    """

    PROJECT_NAME: str = "CoverShift API"
    API_V1_STR: str = "/api/v1"

    # Supabase / DB config
    SUPABASE_URL: str
    SUPABASE_KEY: str
    DATABASE_URL: str

    # JWT verification (backend-side)
    SUPABASE_JWT_SECRET: str
    SUPABASE_JWT_ALG: str = "HS256"

    # Cookie set by the Supabase auth helpers on the front-end
    AUTH_COOKIE_NAME: str = "sb-access-token"

    # Service role key bypasses RLS (backend only)
    SUPABASE_SERVICE_ROLE_KEY: str | None = None

    # Storage buckets for teacher documents
    AVATARS_BUCKET: str = "avatars"
    QUALIFICATIONS_BUCKET: str = "qualifications"

    APP_ORIGIN: str = "http://localhost:3000"

    # Job lifecycle behaviour
    DECLINE_REOPENS_JOB: bool = False

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
