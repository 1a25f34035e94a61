from supabase import Client
from pulse.core import errors
from pulse.modules.onboarding.sequencer import (
    MODULES, MODULE_ORDER, COMPLETION_FLAGS,
    OnboardingSequencer, InvalidOnboardingState, applicable_modules
)
from pulse.modules.onboarding.schemas import OnboardingStateResponse
from typing import Any, Dict, List, Optional, Tuple
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

DASHBOARD_PATH = "/dashboard"

# Columns the client may never write through the raw progress endpoint
_PROTECTED_COLUMNS = {"id", "user_id", "created_at"}


def module_catalogue() -> List[Dict[str, Any]]:
    return [
        {
            "key": MODULES[k].key,
            "title": MODULES[k].title,
            "steps": [{"id": s.id, "title": s.title} for s in MODULES[k].steps],
        }
        for k in MODULE_ORDER
    ]


class SupabaseProgressStore:
    """ProgressStore backed by the user's user_onboarding row."""

    def __init__(self, service: "OnboardingService", user_id: str):
        self.service = service
        self.user_id = user_id

    def save_steps(self, completed_steps: List[str], step_data: Dict[str, Any]) -> None:
        self.service.save_progress(self.user_id, {"completed_steps": completed_steps, "step_data": step_data})

    def mark_module_complete(self, module_key: str) -> None:
        updates: Dict[str, Any] = {MODULES[module_key].completion_flag: True}
        if module_key == "core":
            updates["profile_completed"] = True
            updates["onboarding_completion_date"] = datetime.utcnow().isoformat()
        self.service.save_progress(self.user_id, updates)
        logger.info(f"Onboarding module {module_key} complete for {self.user_id}")


class OnboardingService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_progress(self, user_id: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table("user_onboarding")\
            .select("*")\
            .eq("user_id", user_id)\
            .maybe_single()\
            .execute()
        return result.data if result else None

    def ensure_progress_row(self, user_id: str) -> Dict[str, Any]:
        """Insert an all-false progress row when none exists; never touches an existing one."""
        existing = self.get_progress(user_id)
        if existing:
            return existing
        result = self.supabase.table("user_onboarding").insert({
            "user_id": user_id,
            "onboarding_completed": False,
            "agent_onboarding_completed": False,
            "call_center_onboarding_completed": False,
            "completed_steps": [],
            "step_data": {},
        }).execute()
        logger.info(f"Created onboarding record for {user_id}")
        return result.data[0] if result.data else {}

    def save_progress(self, user_id: str, progress_data: Dict[str, Any]) -> Dict[str, Any]:
        """Upsert progress fields. Completion flags only ever move false -> true."""
        try:
            existing = self.get_progress(user_id) or {}
            payload = {k: v for k, v in progress_data.items() if k not in _PROTECTED_COLUMNS}
            for flag in COMPLETION_FLAGS:
                if flag in payload and not payload[flag] and existing.get(flag):
                    payload.pop(flag)
            payload["user_id"] = user_id
            payload["updated_at"] = datetime.utcnow().isoformat()
            result = self.supabase.table("user_onboarding")\
                .upsert(payload, on_conflict="user_id")\
                .execute()
            if not result.data:
                raise errors.ApiError(500, errors.PERSISTENCE_FAILED, "Failed to save onboarding progress")
            return result.data[0]
        except errors.ApiError:
            raise
        except Exception as e:
            logger.error(f"Onboarding save error for {user_id}: {e}")
            raise errors.ApiError(500, errors.PERSISTENCE_FAILED, f"Failed to save onboarding progress: {e}")

    def get_tier(self, user_id: str) -> Tuple[Optional[str], bool]:
        result = self.supabase.table("profiles")\
            .select("subscription_tier, has_call_center_addon")\
            .eq("id", user_id)\
            .maybe_single()\
            .execute()
        profile = (result.data if result else None) or {}
        return profile.get("subscription_tier"), bool(profile.get("has_call_center_addon"))

    def build_sequencer(self, user_id: str) -> OnboardingSequencer:
        tier, has_call_center = self.get_tier(user_id)
        sequencer = OnboardingSequencer(
            active_modules=applicable_modules(tier, has_call_center),
            store=SupabaseProgressStore(self, user_id),
        )
        return sequencer.start(self.get_progress(user_id))

    def to_state(self, sequencer: OnboardingSequencer) -> OnboardingStateResponse:
        snapshot = sequencer.snapshot()
        return OnboardingStateResponse(
            **snapshot,
            redirect=DASHBOARD_PATH if sequencer.complete else None,
            modules=module_catalogue(),
        )

    def get_state(self, user_id: str) -> OnboardingStateResponse:
        return self.to_state(self.build_sequencer(user_id))

    def advance(self, user_id: str, module: str, step_index: int, step_data: Optional[Dict[str, Any]]) -> OnboardingStateResponse:
        sequencer = self.build_sequencer(user_id)
        try:
            sequencer.move_to(module, step_index)
        except InvalidOnboardingState as e:
            raise errors.ApiError(409, errors.INVALID_ONBOARDING_STATE, str(e))
        sequencer.advance(step_data)
        return self.to_state(sequencer)

    def retreat(self, user_id: str, module: str, step_index: int) -> OnboardingStateResponse:
        sequencer = self.build_sequencer(user_id)
        try:
            sequencer.move_to(module, step_index).retreat()
        except InvalidOnboardingState as e:
            raise errors.ApiError(409, errors.INVALID_ONBOARDING_STATE, str(e))
        return self.to_state(sequencer)

    def reset(self, user_id: str) -> OnboardingStateResponse:
        return self.to_state(self.build_sequencer(user_id).reset())
