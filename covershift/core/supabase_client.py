# covershift/core/supabase_client.py
import logging
import uuid
from functools import lru_cache

from supabase import create_client, Client

from covershift.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


@lru_cache
def supabase_admin() -> Client:
    """
    Create a Supabase client with the service role key.

    Use cases:
      - admin Auth operations (look up a teacher's email by id)
      - uploading teacher avatars / qualifications to Storage

    WARNING:
      - Never expose service role key to frontend.
      - Only backend should call this.

    Raises:
        RuntimeError: if SUPABASE_SERVICE_ROLE_KEY is not set.
    """
    if not settings.SUPABASE_SERVICE_ROLE_KEY:
        raise RuntimeError("Missing SUPABASE_SERVICE_ROLE_KEY in .env")
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)


def lookup_user_email(user_id: uuid.UUID) -> str | None:
    """
    Resolve the email of an auth user through the admin Auth API.

    Returns None when the user does not exist or has no email.
    Raises RuntimeError if the service role key is missing.
    """
    client = supabase_admin()
    try:
        response = client.auth.admin.get_user_by_id(str(user_id))
    except Exception as e:
        logger.warning(f"Admin user lookup failed for {user_id}: {e}")
        return None

    user = getattr(response, "user", None)
    if user is None:
        return None
    return user.email or None
