"""
Goal confidence and pace.

Pure functions over numbers and dates. Confidence compares how much of the
target is done against how much of the goal's time window has elapsed:

    value_fraction = current / target            (0 when target <= 0)
    time_fraction  = elapsed / window            (clamped to [0, 1], 1 for an empty window)

    value_fraction >= 1     -> 100
    time_fraction == 0      -> max(50, 100 * value_fraction)
    otherwise               -> 100 * value_fraction / time_fraction

rounded half-up and clamped to [0, 100]. For a fixed time this is
non-decreasing in current.
"""

from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional, Union
import math

STATUS_ACTIVE = "active"
STATUS_COMPLETED = "completed"
STATUS_AT_RISK = "at-risk"

PACE_COMPLETED = "completed"
PACE_ON_TRACK = "on-track"
PACE_BEHIND = "behind"
PACE_AT_RISK = "at-risk"

# Below this share of expected progress a goal is at risk rather than just behind
AT_RISK_RATIO = 0.8

DateLike = Union[date, datetime, str, None]


def round_half_up(value: float, places: int = 0) -> float:
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return float(rounded)


def to_datetime(value: DateLike) -> Optional[datetime]:
    """Parse ISO strings / dates into aware UTC datetimes. Unparseable input gives None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    else:
        try:
            dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _number(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def value_fraction(target_value: Any, current_value: Any) -> float:
    target = _number(target_value)
    if target <= 0:
        return 0.0
    return max(0.0, _number(current_value) / target)


def time_fraction(start: DateLike, deadline: DateLike, now: DateLike = None) -> float:
    start_dt = to_datetime(start)
    deadline_dt = to_datetime(deadline)
    now_dt = to_datetime(now) or datetime.now(timezone.utc)
    if start_dt is None or deadline_dt is None:
        return 1.0 if deadline_dt is not None and now_dt >= deadline_dt else 0.0
    window = (deadline_dt - start_dt).total_seconds()
    if window <= 0:
        return 1.0
    elapsed = (now_dt - start_dt).total_seconds()
    return min(1.0, max(0.0, elapsed / window))


def confidence_score(
    target_value: Any,
    current_value: Any,
    start: DateLike,
    deadline: DateLike,
    now: DateLike = None,
) -> int:
    v = value_fraction(target_value, current_value)
    if v >= 1:
        return 100
    t = time_fraction(start, deadline, now)
    if t == 0:
        raw = max(50.0, 100 * v)
    else:
        raw = 100 * v / t
    return int(min(100.0, max(0.0, round_half_up(raw))))


def pace_status(
    target_value: Any,
    current_value: Any,
    start: DateLike,
    deadline: DateLike,
    now: DateLike = None,
) -> Dict[str, Any]:
    """Actual vs. expected progress for a goal, plus how much is needed to get back on pace."""
    actual = value_fraction(target_value, current_value)
    expected = time_fraction(start, deadline, now)
    target = _number(target_value)
    current = _number(current_value)

    if target > 0 and current >= target:
        status = PACE_COMPLETED
    elif actual < expected * AT_RISK_RATIO:
        status = PACE_AT_RISK
    elif actual < expected:
        status = PACE_BEHIND
    else:
        status = PACE_ON_TRACK

    needed = max(0, math.ceil(target * expected - current)) if status in (PACE_AT_RISK, PACE_BEHIND) else 0
    return {
        "status": status,
        "progress": int(round_half_up(actual * 100)),
        "expected_progress": int(round_half_up(expected * 100)),
        "needed_to_pace": needed,
    }


def derive_status(target_value: Any, current_value: Any, start: DateLike, deadline: DateLike, now: DateLike = None) -> str:
    """Goal status implied by its numbers: completed, at-risk, or active."""
    target = _number(target_value)
    if target > 0 and _number(current_value) >= target:
        return STATUS_COMPLETED
    if pace_status(target_value, current_value, start, deadline, now)["status"] == PACE_AT_RISK:
        return STATUS_AT_RISK
    return STATUS_ACTIVE


def goal_start(goal: Dict[str, Any]) -> DateLike:
    return goal.get("start_date") or goal.get("created_at") or goal.get("created_date")


def goal_confidence(goal: Dict[str, Any], now: DateLike = None) -> Optional[int]:
    """Confidence for a stored goal row; only active and at-risk goals carry one."""
    if goal.get("status") not in (STATUS_ACTIVE, STATUS_AT_RISK):
        return None
    return confidence_score(
        goal.get("target_value"),
        goal.get("current_value") or 0,
        goal_start(goal),
        goal.get("deadline"),
        now,
    )
