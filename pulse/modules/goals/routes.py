from fastapi import APIRouter, Depends
from pulse.core.dependencies import get_current_user_id
from pulse.database.supabase_client import get_supabase
from pulse.modules.goals.schemas import GoalCreate, GoalUpdate, GoalProgressUpdate, GoalResponse
from pulse.modules.goals.service import GoalService
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/goals", tags=["goals"])


def get_goal_service(supabase: Client = Depends(get_supabase)) -> GoalService:
    return GoalService(supabase)


@router.get("", response_model=List[GoalResponse])
async def list_goals(
    status: Optional[str] = None,
    user_data: Dict = Depends(get_current_user_id),
    service: GoalService = Depends(get_goal_service)
):
    """List the caller's goals with live confidence and pace"""
    return service.list_goals(user_data["id"], status)


@router.post("", response_model=GoalResponse, status_code=201)
async def create_goal(
    goal_data: GoalCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: GoalService = Depends(get_goal_service)
):
    return service.create_goal(goal_data, user_data["id"])


@router.patch("/{goal_id}", response_model=GoalResponse)
async def update_goal(
    goal_id: str,
    goal_data: GoalUpdate,
    user_data: Dict = Depends(get_current_user_id),
    service: GoalService = Depends(get_goal_service)
):
    """Update a goal. Sending current_value re-derives status; sending only status overrides it."""
    return service.update_goal(goal_id, goal_data, user_data["id"])


@router.post("/{goal_id}/progress", response_model=GoalResponse)
async def update_goal_progress(
    goal_id: str,
    body: GoalProgressUpdate,
    user_data: Dict = Depends(get_current_user_id),
    service: GoalService = Depends(get_goal_service)
):
    return service.update_progress(goal_id, body.current_value, user_data["id"])


@router.delete("/{goal_id}")
async def delete_goal(
    goal_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: GoalService = Depends(get_goal_service)
):
    service.delete_goal(goal_id, user_data["id"])
    return {"success": True}
