from fastapi import APIRouter, Depends
from pulse.core.dependencies import get_current_user_id
from pulse.database.supabase_client import get_supabase
from pulse.modules.calls.schemas import CallCampaignRequest, CallCampaignResponse
from pulse.modules.calls.service import CallCampaignService
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/calls", tags=["calls"])


def get_call_campaign_service(supabase: Client = Depends(get_supabase)) -> CallCampaignService:
    return CallCampaignService(supabase)


@router.post("/campaigns", response_model=CallCampaignResponse)
async def start_call_campaign(
    body: CallCampaignRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: CallCampaignService = Depends(get_call_campaign_service)
):
    """Dial a list of contacts with the user's AI sales agent"""
    return await service.start_campaign(user_data["id"], body)
