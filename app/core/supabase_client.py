from functools import lru_cache
from supabase import create_client, Client, ClientOptions

from app.core.config import get_settings

settings = get_settings()

APPLICATION_NAME = "n-sine-medical"


@lru_cache
def supabase_public() -> Client:
    """
    Create a Supabase client with the anon/public key.

    Use cases:
      - verifying access tokens via Supabase Auth when no JWT secret
        is configured

    Note: This client still respects RLS.
    """
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)


def new_supabase_client() -> Client:
    """
    Create a fresh anon client that keeps its auth session in memory only.

    Each sign-in / sign-up request gets its own client so sessions of
    different users never share state inside the backend process.
    """
    options = ClientOptions(
        persist_session=False,
        auto_refresh_token=False,
        headers={"x-application-name": APPLICATION_NAME},
    )
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY, options=options)
