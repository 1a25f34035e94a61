from supabase import create_client, Client
from pulse.config import settings
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class SupabaseClient:
    """Process-wide Supabase client.

    Sessions are Clerk JWTs, which Postgres RLS cannot see, so the app talks to
    Supabase with the service-role key and every service scopes its queries by
    owner itself. The anon key is only a local-development fallback.
    """

    _client: Optional[Client] = None

    @classmethod
    def _key(cls) -> str:
        if settings.supabase_service_role_key:
            return settings.supabase_service_role_key
        logger.warning("SUPABASE_SERVICE_ROLE_KEY not set; falling back to the anon key (RLS will apply)")
        return settings.supabase_key

    @classmethod
    def get_client(cls) -> Client:
        if cls._client is None:
            if not settings.supabase_url:
                raise RuntimeError("SUPABASE_URL is not configured")
            cls._client = create_client(settings.supabase_url, cls._key())
        return cls._client

    @classmethod
    def reset_client(cls):
        cls._client = None


def get_supabase() -> Client:
    return SupabaseClient.get_client()
