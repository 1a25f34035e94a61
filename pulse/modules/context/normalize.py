"""
Storage-row -> view-model normalization for the user context.

Everything here is pure and total: missing rows stay None, list fields are
always lists, and nothing raises on an unexpected shape.
"""

from pulse.modules.goals.calculator import goal_confidence
from typing import Any, Dict, List, Optional
import re

DEFAULT_PREFERENCES: Dict[str, Any] = {
    "coachingStyle": "balanced",
    "activityMode": "get_moving",
    "dailyReminders": True,
    "weeklyReports": True,
    "marketUpdates": True,
    "emailNotifications": True,
    "timezone": "America/New_York",
}

# Display strings default to "", everything else to None
PROFILE_DEFAULTS: Dict[str, Any] = {
    "id": None,
    "email": "",
    "fullName": "",
    "phone": "",
    "avatarUrl": None,
    "brokerageName": "",
    "licenseNumber": "",
    "specialization": "",
    "yearsExperience": None,
    "subscriptionTier": None,
    "subscriptionStatus": None,
    "pastDueStartDate": None,
    "hasCallCenterAddon": False,
    "isAdmin": False,
}

_CAMEL_RE = re.compile(r"_([a-z0-9])")


def to_camel(key: str) -> str:
    return _CAMEL_RE.sub(lambda m: m.group(1).upper(), key)


def camelize(row: Any) -> Any:
    """Recursively convert dict keys from snake_case to camelCase."""
    if isinstance(row, dict):
        return {to_camel(k) if isinstance(k, str) else k: camelize(v) for k, v in row.items()}
    if isinstance(row, list):
        return [camelize(item) for item in row]
    return row


def normalize_row(row: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not isinstance(row, dict):
        return None
    return camelize(row)


def normalize_rows(rows: Any) -> List[Dict[str, Any]]:
    if not isinstance(rows, list):
        return []
    return [camelize(r) for r in rows if isinstance(r, dict)]


def normalize_profile(profile: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    user = dict(PROFILE_DEFAULTS)
    for key, value in (normalize_row(profile) or {}).items():
        if value is None and key in PROFILE_DEFAULTS:
            continue
        user[key] = value
    return user


def normalize_preferences(preferences: Optional[Dict[str, Any]], user_id: Optional[str] = None) -> Dict[str, Any]:
    row = normalize_row(preferences)
    if row is None:
        return {"userId": user_id, **DEFAULT_PREFERENCES}
    return {**DEFAULT_PREFERENCES, **{k: v for k, v in row.items() if v is not None}}


def normalize_goals(goals: Any, now=None) -> List[Dict[str, Any]]:
    result = []
    for goal in goals if isinstance(goals, list) else []:
        if not isinstance(goal, dict):
            continue
        view = camelize(goal)
        view["confidenceLevel"] = goal_confidence(goal, now)
        result.append(view)
    return result


def normalize_context(raw: Dict[str, Any], now=None) -> Dict[str, Any]:
    """Build the camelCase context object from raw per-table reads."""
    user = normalize_profile(raw.get("profile"))
    return {
        "user": user,
        "onboarding": normalize_row(raw.get("onboarding")),
        "marketConfig": normalize_row(raw.get("market_config")),
        "preferences": normalize_preferences(raw.get("preferences"), user["id"]),
        "actions": normalize_rows(raw.get("actions")),
        "agentConfig": normalize_row(raw.get("agent_config")),
        "userAgentSubscription": normalize_row(raw.get("user_agent_subscription")),
        "goals": normalize_goals(raw.get("goals"), now),
        "businessPlan": normalize_row(raw.get("business_plan")),
        "pulseHistory": normalize_rows(raw.get("pulse_history")),
        "pulseConfig": normalize_row(raw.get("pulse_config")),
        "agentProfile": normalize_row(raw.get("agent_profile")),
    }
