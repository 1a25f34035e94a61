from supabase import Client
from fastapi import HTTPException
from pulse.core import errors
from pulse.modules.goals.service import GoalService
from pulse.modules.planner.calculator import calculate_plan
from pulse.modules.planner.schemas import PlanInputs, PlanResult, PlanResponse
from typing import Any, Dict, List, Optional
from datetime import datetime
from pydantic import ValidationError
import logging

logger = logging.getLogger(__name__)

# title, category, unit, and how to read the target off a plan result
ANNUAL_GOALS = (
    ("Total Conversations", "lead-generation", "conversations", lambda r: r.funnel["total"].annual.conversations),
    ("Total Appointments Set", "lead-generation", "appointments", lambda r: r.funnel["total"].annual.appointments),
    ("Total Agreements Signed", "production", "agreements", lambda r: r.funnel["total"].annual.agreements),
    ("Total Under Contract", "production", "contracts", lambda r: r.funnel["total"].annual.contracts),
    ("Total Buyers Closed", "production", "closings", lambda r: r.buyer_deals),
    ("Total Listings Closed", "production", "closings", lambda r: r.listing_deals),
    ("Total Sales Volume", "production", "USD", lambda r: r.total_sales_volume),
    ("Total GCI", "production", "USD", lambda r: r.gci_required),
)


def goals_from_plan(inputs: PlanInputs, result: PlanResult) -> List[Dict[str, Any]]:
    deadline = f"{inputs.plan_year}-12-31"
    return [
        {
            "title": title,
            "category": category,
            "goal_type": "annual",
            "unit": unit,
            "timeframe": str(inputs.plan_year),
            "target_value": target(result),
            "current_value": 0,
            "deadline": deadline,
            "status": "active",
        }
        for title, category, unit, target in ANNUAL_GOALS
    ]


def plan_row(user_id: str, inputs: PlanInputs, result: PlanResult, is_active: bool) -> Dict[str, Any]:
    return {
        "user_id": user_id,
        "plan_year": inputs.plan_year,
        "annual_gci_goal": result.gci_required,
        "average_commission": result.avg_commission,
        "transactions_needed": result.total_deals_needed,
        "conversion_rates": {
            "buyer": inputs.buyer_conversion_rates.model_dump(),
            "listing": inputs.listing_conversion_rates.model_dump(),
        },
        "monthly_breakdown": {name: category.monthly.model_dump() for name, category in result.funnel.items()},
        "detailed_plan": inputs.model_dump(mode="json"),
        "is_active": is_active,
        "updated_at": datetime.utcnow().isoformat(),
    }


class PlannerService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_plan(self, user_id: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table("business_plans")\
            .select("*")\
            .eq("user_id", user_id)\
            .maybe_single()\
            .execute()
        return result.data if result else None

    def load_inputs(self, user_id: str) -> PlanInputs:
        """Saved planner inputs, or the defaults when there is no plan or it no longer validates."""
        plan = self.get_plan(user_id)
        detailed = (plan or {}).get("detailed_plan")
        if not detailed:
            return PlanInputs()
        try:
            return PlanInputs.model_validate(detailed)
        except ValidationError as e:
            logger.warning(f"Stored plan for {user_id} failed validation, using defaults: {e}")
            return PlanInputs()

    def save_plan(self, user_id: str, inputs: PlanInputs, is_active: bool = False) -> PlanResponse:
        result = calculate_plan(inputs)
        try:
            saved = self.supabase.table("business_plans")\
                .upsert(plan_row(user_id, inputs, result, is_active), on_conflict="user_id")\
                .execute()
        except Exception as e:
            logger.error(f"Business plan save failed for {user_id}: {e}")
            raise errors.ApiError(500, errors.PERSISTENCE_FAILED, f"Failed to save business plan: {e}")
        logger.info(f"Saved {inputs.plan_year} plan for {user_id}: {result.total_deals_needed} deals")
        return PlanResponse(inputs=inputs, result=result, plan=saved.data[0] if saved.data else None)

    def activate_plan(self, user_id: str, inputs: PlanInputs) -> PlanResponse:
        """Save the plan as active and write its eight annual goals."""
        response = self.save_plan(user_id, inputs, is_active=True)
        goal_service = GoalService(self.supabase)
        try:
            response.goals = [
                goal_service.upsert_by_title(user_id, goal)
                for goal in goals_from_plan(inputs, response.result)
            ]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Goal activation failed for {user_id}: {e}")
            raise errors.ApiError(500, errors.PERSISTENCE_FAILED, f"Failed to activate goals: {e}")
        return response
