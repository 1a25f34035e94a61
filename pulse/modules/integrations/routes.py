from fastapi import APIRouter, Depends, HTTPException
from pulse.core.dependencies import get_current_user_id
from pulse.database.supabase_client import get_supabase
from pulse.modules.integrations.schemas import IntegrationStatusResponse, GoogleCalendarRequest, GoogleCalendarTokenResponse
from pulse.modules.integrations.service import IntegrationService
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/integrations", tags=["integrations"])


def get_integration_service(supabase: Client = Depends(get_supabase)) -> IntegrationService:
    return IntegrationService(supabase)


@router.get("/status", response_model=IntegrationStatusResponse)
async def integration_status(
    user_data: Dict = Depends(get_current_user_id),
    service: IntegrationService = Depends(get_integration_service)
):
    return IntegrationStatusResponse(integrations=service.list_connections(user_data["id"]))


@router.post("/google-calendar", response_model=GoogleCalendarTokenResponse)
async def google_calendar(
    body: GoogleCalendarRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: IntegrationService = Depends(get_integration_service)
):
    """Google Calendar auth actions; only check_token is implemented"""
    if body.action != "check_token":
        raise HTTPException(status_code=501, detail="Action not implemented")
    return GoogleCalendarTokenResponse(has_token=service.has_google_token(user_data["id"]))
