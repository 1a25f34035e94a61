from fastapi import APIRouter, Depends
from pulse.core.dependencies import get_current_user_id
from pulse.database.supabase_client import get_supabase
from pulse.modules.context.service import ContextService
from supabase import Client
from typing import Any, Dict

router = APIRouter(prefix="/context", tags=["context"])


def get_context_service(supabase: Client = Depends(get_supabase)) -> ContextService:
    return ContextService(supabase)


@router.get("", response_model=Dict[str, Any])
async def get_user_context(
    user_data: Dict = Depends(get_current_user_id),
    service: ContextService = Depends(get_context_service)
):
    """Profile, onboarding, goals, plan, actions and pulse history in one round trip"""
    return service.get_context(user_data["id"])
