from supabase import Client
from fastapi import HTTPException
from pulse.config.settings import settings
from pulse.core import errors
from pulse.core.dependencies import is_admin
from pulse.modules.context.normalize import normalize_context
from pulse.modules.goals.calculator import to_datetime
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional
import logging

logger = logging.getLogger(__name__)

STATUS_PAST_DUE = "past_due"
STATUS_LOCKED_OUT = "locked_out"


class ContextService:
    """Single-call snapshot of everything the client needs about the signed-in user."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _single(self, table: str, user_id: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table(table)\
            .select("*")\
            .eq("user_id", user_id)\
            .maybe_single()\
            .execute()
        return result.data if result else None

    def _profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table("profiles")\
            .select("*")\
            .eq("id", user_id)\
            .maybe_single()\
            .execute()
        return result.data if result else None

    def _actions(self, user_id: str):
        return self.supabase.table("daily_actions")\
            .select("*")\
            .eq("user_id", user_id)\
            .order("due_date", desc=True)\
            .limit(settings.context_actions_limit)\
            .execute().data or []

    def _goals(self, user_id: str):
        return self.supabase.table("goals")\
            .select("*")\
            .eq("user_id", user_id)\
            .execute().data or []

    def _pulse_history(self, user_id: str):
        return self.supabase.table("pulse_scores")\
            .select("*")\
            .eq("user_id", user_id)\
            .order("date", desc=True)\
            .limit(settings.context_pulse_limit)\
            .execute().data or []

    def _readers(self) -> Dict[str, Callable[[str], Any]]:
        # key -> reader; the value on failure is decided by _fallback
        return {
            "onboarding": lambda uid: self._single("user_onboarding", uid),
            "market_config": lambda uid: self._single("market_config", uid),
            "preferences": lambda uid: self._single("user_preferences", uid),
            "actions": self._actions,
            "agent_config": lambda uid: self._single("agent_config", uid),
            "user_agent_subscription": lambda uid: self._single("user_agent_subscription", uid),
            "goals": self._goals,
            "business_plan": lambda uid: self._single("business_plans", uid),
            "pulse_history": self._pulse_history,
            "pulse_config": lambda uid: self._single("pulse_config", uid),
            "agent_profile": lambda uid: self._single("agent_intelligence_profiles", uid),
        }

    @staticmethod
    def _fallback(key: str):
        return [] if key in ("actions", "goals", "pulse_history") else None

    def fetch_raw(self, user_id: str) -> Dict[str, Any]:
        """Read all per-user tables concurrently. Only the profile read is fatal."""
        readers = self._readers()
        raw: Dict[str, Any] = {}
        with ThreadPoolExecutor(max_workers=len(readers) + 1) as pool:
            profile_future = pool.submit(self._profile, user_id)
            futures = {key: pool.submit(reader, user_id) for key, reader in readers.items()}

            try:
                profile = profile_future.result()
            except Exception as e:
                logger.error(f"Profile fetch error for {user_id}: {e}")
                raise HTTPException(status_code=500, detail="Failed to fetch user profile")
            if not profile:
                raise errors.not_found("Profile not found")
            raw["profile"] = profile

            for key, future in futures.items():
                try:
                    raw[key] = future.result()
                except Exception as e:
                    logger.warning(f"Context read {key} failed for {user_id}: {e}")
                    raw[key] = self._fallback(key)
        return raw

    def apply_lockout(self, profile: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
        """Lock out accounts that have been past due for too long."""
        if profile.get("subscription_status") != STATUS_PAST_DUE:
            return profile
        started = to_datetime(profile.get("past_due_start_date"))
        if started is None:
            return profile
        now = now or datetime.now(timezone.utc)
        if (now - started).days < settings.past_due_lockout_days:
            return profile
        try:
            self.supabase.table("profiles")\
                .update({"subscription_status": STATUS_LOCKED_OUT})\
                .eq("id", profile["id"])\
                .execute()
            logger.info(f"Locked out {profile['id']} after {(now - started).days} days past due")
        except Exception as e:
            logger.error(f"Failed to lock out {profile.get('id')}: {e}")
        return {**profile, "subscription_status": STATUS_LOCKED_OUT}

    def get_context(self, user_id: str) -> Dict[str, Any]:
        raw = self.fetch_raw(user_id)
        raw["profile"] = self.apply_lockout(raw["profile"])
        context = normalize_context(raw)
        context["user"]["isAdmin"] = is_admin(user_id, self.supabase)
        logger.info(f"Context fetched for {user_id}")
        return context

