from fastapi import APIRouter, Depends
from pulse.core.dependencies import get_current_user_id
from pulse.database.supabase_client import get_supabase
from pulse.modules.planner.calculator import calculate_plan
from pulse.modules.planner.schemas import PlanInputs, PlanResult, PlanResponse
from pulse.modules.planner.service import PlannerService
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/planner", tags=["planner"])


def get_planner_service(supabase: Client = Depends(get_supabase)) -> PlannerService:
    return PlannerService(supabase)


@router.get("/inputs", response_model=PlanInputs)
async def get_plan_inputs(
    user_data: Dict = Depends(get_current_user_id),
    service: PlannerService = Depends(get_planner_service)
):
    """Saved planner inputs (or defaults) to prefill the planner"""
    return service.load_inputs(user_data["id"])


@router.post("/calculate", response_model=PlanResult)
async def calculate(
    inputs: PlanInputs,
    user_data: Dict = Depends(get_current_user_id)
):
    """Pure calculation, nothing is stored"""
    return calculate_plan(inputs)


@router.post("/plan", response_model=PlanResponse)
async def save_plan(
    inputs: PlanInputs,
    user_data: Dict = Depends(get_current_user_id),
    service: PlannerService = Depends(get_planner_service)
):
    return service.save_plan(user_data["id"], inputs)


@router.post("/activate", response_model=PlanResponse)
async def activate_plan(
    inputs: PlanInputs,
    user_data: Dict = Depends(get_current_user_id),
    service: PlannerService = Depends(get_planner_service)
):
    """Save the plan and create or retarget its annual goals"""
    return service.activate_plan(user_data["id"], inputs)
