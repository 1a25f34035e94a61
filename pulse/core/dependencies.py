"""
Core dependencies for route protection and admin checks
"""

from fastapi import Depends, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pulse.core import errors
from pulse.database.supabase_client import get_supabase
from pulse.modules.auth.service import AuthService
from supabase import Client
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

ADMIN_TIER = "Admin"


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from the Clerk session JWT"""
    if credentials is None or not credentials.credentials:
        raise errors.unauthorized("Missing or invalid Authorization header")
    return auth_service.get_current_user(credentials.credentials)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[dict]:
    """Like get_current_user_id but returns None instead of raising (public pages)."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        return auth_service.get_current_user(credentials.credentials)
    except errors.ApiError:
        return None


def get_access_cache(request: Request) -> Dict[str, Any]:
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def is_admin(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> bool:
    """Admin if user_roles has an 'admin' row, or the profile is on the Admin tier."""
    if cache is not None and "is_admin" in cache:
        return cache["is_admin"]
    admin = False
    try:
        roles = supabase.table("user_roles")\
            .select("role")\
            .eq("user_id", user_id)\
            .execute()
        admin = any(r.get("role") == "admin" for r in (roles.data or []))
        if not admin:
            profile = supabase.table("profiles")\
                .select("subscription_tier")\
                .eq("id", user_id)\
                .maybe_single()\
                .execute()
            row = profile.data if profile else None
            admin = bool(row) and row.get("subscription_tier") == ADMIN_TIER
    except Exception as e:
        logger.error(f"Error checking admin role for {user_id}: {e}")
        admin = False
    if cache is not None:
        cache["is_admin"] = admin
    return admin


def require_admin(
    request: Request,
    user_data: dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase)
) -> dict:
    """Dependency that only lets admins through"""
    if not is_admin(user_data["id"], supabase, get_access_cache(request)):
        raise errors.forbidden("Admin access required")
    return user_data
