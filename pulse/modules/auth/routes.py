from fastapi import APIRouter, Depends, Header, HTTPException, Request
from pulse.config.settings import settings
from pulse.core.dependencies import get_current_user_id, is_admin
from pulse.database.supabase_client import get_supabase
from pulse.modules.auth.schemas import CurrentUserResponse, ProfileSyncResponse, ClerkWebhookEvent
from pulse.modules.auth.service import ProfileSyncService, svix_timestamp_error, verify_svix_signature
from supabase import Client
from typing import Dict, Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def get_profile_sync_service(supabase: Client = Depends(get_supabase)) -> ProfileSyncService:
    return ProfileSyncService(supabase)


@router.get("/me", response_model=CurrentUserResponse)
async def get_current_user(
    current_user: Dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase),
):
    """Get current authenticated identity (for frontend session checks)."""
    return CurrentUserResponse(
        id=current_user["id"],
        session_id=current_user.get("session_id"),
        email=current_user.get("email"),
        is_admin=is_admin(current_user["id"], supabase),
    )


@router.post("/sync-profile", response_model=ProfileSyncResponse)
async def sync_profile(
    current_user: Dict = Depends(get_current_user_id),
    service: ProfileSyncService = Depends(get_profile_sync_service),
):
    """Upsert the Clerk profile and bootstrap onboarding progress. Safe to call on every sign-in."""
    return service.sync_from_clerk(current_user["id"])


@router.post("/webhook")
async def clerk_webhook(
    request: Request,
    service: ProfileSyncService = Depends(get_profile_sync_service),
    svix_id: Optional[str] = Header(None, alias="svix-id"),
    svix_timestamp: Optional[str] = Header(None, alias="svix-timestamp"),
    svix_signature: Optional[str] = Header(None, alias="svix-signature"),
):
    """Clerk user lifecycle webhook (Svix signed)."""
    if not settings.clerk_webhook_secret:
        raise HTTPException(status_code=500, detail="Missing CLERK_WEBHOOK_SECRET")
    if not svix_id or not svix_timestamp or not svix_signature:
        raise HTTPException(status_code=400, detail="Missing svix headers")
    payload = await request.body()
    if not verify_svix_signature(payload, svix_id, svix_timestamp, svix_signature, settings.clerk_webhook_secret):
        logger.warning(f"Rejected Clerk webhook {svix_id}: invalid signature")
        raise HTTPException(status_code=400, detail="Invalid signature")
    stale = svix_timestamp_error(svix_timestamp)
    if stale:
        logger.warning(f"Rejected Clerk webhook {svix_id}: {stale}")
        raise HTTPException(status_code=400, detail=stale)
    event = ClerkWebhookEvent.model_validate_json(payload)
    logger.info(f"Clerk webhook event type: {event.type}")
    service.handle_webhook_event(event.type, event.data)
    return {"success": True}
