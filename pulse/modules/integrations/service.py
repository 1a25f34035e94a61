from supabase import Client
from typing import Any, Dict, List
import logging

logger = logging.getLogger(__name__)

GOOGLE_WORKSPACE = "google_workspace"


class IntegrationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_connections(self, user_id: str) -> List[Dict[str, Any]]:
        """Connected external services for the user. A failed read reports none."""
        try:
            result = self.supabase.table("external_service_connections")\
                .select("*")\
                .eq("user_id", user_id)\
                .execute()
            return result.data or []
        except Exception as e:
            logger.error(f"Error fetching integrations for {user_id}: {e}")
            return []

    def has_google_token(self, user_id: str) -> bool:
        """True when the user has a connected Google Workspace account."""
        return any(
            c.get("service_name") == GOOGLE_WORKSPACE and c.get("connection_status") == "connected"
            for c in self.list_connections(user_id)
        )
