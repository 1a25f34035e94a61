from fastapi import APIRouter, Depends
from pulse.core import errors
from pulse.core.dependencies import get_current_user_id
from pulse.database.supabase_client import get_supabase
from pulse.modules.onboarding.schemas import (
    OnboardingStateResponse, OnboardingPositionRequest, OnboardingAdvanceRequest,
    OnboardingProgressRequest, OnboardingProgressResponse
)
from pulse.modules.onboarding.service import OnboardingService
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/onboarding", tags=["onboarding"])


def get_onboarding_service(supabase: Client = Depends(get_supabase)) -> OnboardingService:
    return OnboardingService(supabase)


@router.get("/state", response_model=OnboardingStateResponse)
async def get_onboarding_state(
    user_data: Dict = Depends(get_current_user_id),
    service: OnboardingService = Depends(get_onboarding_service)
):
    """Where to resume; `redirect` is set once every applicable module is complete."""
    return service.get_state(user_data["id"])


@router.post("/advance", response_model=OnboardingStateResponse)
async def advance_onboarding(
    body: OnboardingAdvanceRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: OnboardingService = Depends(get_onboarding_service)
):
    """Complete the given step and return the next position"""
    return service.advance(user_data["id"], body.module, body.step_index, body.step_data)


@router.post("/retreat", response_model=OnboardingStateResponse)
async def retreat_onboarding(
    body: OnboardingPositionRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: OnboardingService = Depends(get_onboarding_service)
):
    return service.retreat(user_data["id"], body.module, body.step_index)


@router.post("/reset", response_model=OnboardingStateResponse)
async def reset_onboarding(
    user_data: Dict = Depends(get_current_user_id),
    service: OnboardingService = Depends(get_onboarding_service)
):
    """Hard reset to the first step of the first module (recovery from an invalid state)"""
    return service.reset(user_data["id"])


@router.post("/progress", response_model=OnboardingProgressResponse)
async def save_onboarding_progress(
    body: OnboardingProgressRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: OnboardingService = Depends(get_onboarding_service)
):
    """Upsert raw progress fields onto the caller's onboarding row"""
    if not body.progress_data:
        raise errors.missing_field("Missing progressData in request body")
    data = service.save_progress(user_data["id"], body.progress_data)
    return OnboardingProgressResponse(success=True, data=data)
