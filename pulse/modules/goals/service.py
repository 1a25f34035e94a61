from supabase import Client
from fastapi import HTTPException
from pulse.core import errors
from pulse.modules.goals.schemas import GoalCreate, GoalUpdate, GoalResponse
from pulse.modules.goals import calculator
from typing import Any, Dict, List, Optional
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 50


def with_derived(goal: Dict[str, Any], now=None) -> GoalResponse:
    """Attach live confidence and pace to a stored goal row."""
    pace = None
    if goal.get("target_value") is not None:
        pace = calculator.pace_status(
            goal.get("target_value"),
            goal.get("current_value") or 0,
            calculator.goal_start(goal),
            goal.get("deadline"),
            now,
        )
    return GoalResponse(**{**goal, "confidence_level": calculator.goal_confidence(goal, now), "pace": pace})


def reconcile_status(existing: Dict[str, Any], changes: Dict[str, Any], now=None) -> Dict[str, Any]:
    """Apply the status rule to an update payload.

    Writing current_value or target_value derives status and confidence from
    the numbers. A status written without either is a manual override.
    """
    merged = {**existing, **changes}
    if {"current_value", "target_value"} & changes.keys():
        changes["status"] = calculator.derive_status(
            merged.get("target_value"), merged.get("current_value"),
            calculator.goal_start(merged), merged.get("deadline"), now,
        )
    if {"current_value", "target_value", "deadline"} & changes.keys():
        changes["confidence_score"] = calculator.confidence_score(
            merged.get("target_value"), merged.get("current_value") or 0,
            calculator.goal_start(merged), merged.get("deadline"), now,
        )
    return changes


class GoalService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_goals(self, user_id: str, status: Optional[str] = None) -> List[GoalResponse]:
        try:
            query = self.supabase.table("goals").select("*").eq("user_id", user_id)
            if status:
                query = query.eq("status", status)
            result = query.order("created_at", desc=True).execute()
            return [with_derived(g) for g in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to list goals: {str(e)}")

    def get_goal_row(self, goal_id: str, user_id: str) -> Dict[str, Any]:
        result = self.supabase.table("goals")\
            .select("*")\
            .eq("id", goal_id)\
            .eq("user_id", user_id)\
            .maybe_single()\
            .execute()
        goal = result.data if result else None
        if not goal:
            raise errors.not_found("Goal not found")
        return goal

    def create_goal(self, goal_data: GoalCreate, user_id: str) -> GoalResponse:
        try:
            insert_data = goal_data.model_dump(mode="json")
            insert_data["user_id"] = user_id
            insert_data["confidence_score"] = DEFAULT_CONFIDENCE
            if "current_value" in goal_data.model_fields_set:
                insert_data["status"] = calculator.derive_status(
                    goal_data.target_value, goal_data.current_value,
                    None, goal_data.deadline,
                )
            result = self.supabase.table("goals").insert(insert_data).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create goal")
            logger.info(f"Created goal '{goal_data.title}' for {user_id}")
            return with_derived(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to create goal: {str(e)}")

    def update_goal(self, goal_id: str, goal_data: GoalUpdate, user_id: str) -> GoalResponse:
        changes = goal_data.model_dump(mode="json", exclude_unset=True)
        if not changes:
            raise errors.missing_field("Missing goalData for update operation")
        return self._apply(goal_id, user_id, changes)

    def update_progress(self, goal_id: str, current_value: float, user_id: str) -> GoalResponse:
        return self._apply(goal_id, user_id, {"current_value": current_value})

    def _apply(self, goal_id: str, user_id: str, changes: Dict[str, Any]) -> GoalResponse:
        try:
            existing = self.get_goal_row(goal_id, user_id)
            update_data = reconcile_status(existing, changes)
            update_data["updated_at"] = datetime.utcnow().isoformat()
            result = self.supabase.table("goals")\
                .update(update_data)\
                .eq("id", goal_id)\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise errors.not_found("Goal not found")
            return with_derived(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to update goal: {str(e)}")

    def delete_goal(self, goal_id: str, user_id: str) -> None:
        try:
            self.supabase.table("goals")\
                .delete()\
                .eq("id", goal_id)\
                .eq("user_id", user_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to delete goal: {str(e)}")

    def upsert_by_title(self, user_id: str, goal: Dict[str, Any]) -> Dict[str, Any]:
        """Create or retarget the user's goal with this title and goal_type. Progress is kept."""
        existing = self.supabase.table("goals")\
            .select("*")\
            .eq("user_id", user_id)\
            .eq("title", goal["title"])\
            .eq("goal_type", goal["goal_type"])\
            .limit(1)\
            .execute()
        if existing.data:
            row = existing.data[0]
            changes = {k: v for k, v in goal.items() if k not in ("current_value", "status")}
            update_data = reconcile_status(row, changes)
            update_data["updated_at"] = datetime.utcnow().isoformat()
            result = self.supabase.table("goals")\
                .update(update_data)\
                .eq("id", row["id"])\
                .eq("user_id", user_id)\
                .execute()
        else:
            result = self.supabase.table("goals")\
                .insert({**goal, "user_id": user_id, "confidence_score": DEFAULT_CONFIDENCE})\
                .execute()
        return result.data[0] if result.data else goal
