from supabase import Client
from fastapi import HTTPException
from pulse.modules.context.normalize import camelize
from pulse.modules.goals.calculator import round_half_up
from typing import Any, Dict, List, Optional
from datetime import datetime, timedelta
import logging

logger = logging.getLogger(__name__)

ACTIVE_WINDOW_DAYS = 30
PULSE_SAMPLE_SIZE = 100


class AdminService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _count(self, table: str, **eq: Any) -> int:
        query = self.supabase.table(table).select("id", count="exact")
        for column, value in eq.items():
            query = query.eq(column, value)
        return query.execute().count or 0

    def platform_metrics(self) -> Dict[str, Any]:
        try:
            since = (datetime.utcnow() - timedelta(days=ACTIVE_WINDOW_DAYS)).isoformat()
            active = self.supabase.table("profiles")\
                .select("id", count="exact")\
                .gte("updated_at", since)\
                .execute()
            total_actions = self._count("daily_actions")
            completed_actions = self._count("daily_actions", status="completed")
            pulse = self.supabase.table("pulse_scores")\
                .select("overall_score")\
                .order("created_at", desc=True)\
                .limit(PULSE_SAMPLE_SIZE)\
                .execute().data or []
            scores = [float(p["overall_score"]) for p in pulse if p.get("overall_score") is not None]
            return {
                "total_users": self._count("profiles"),
                "active_users": active.count or 0,
                "total_goals": self._count("goals"),
                "total_actions": total_actions,
                "completed_actions": completed_actions,
                "completion_rate": (completed_actions / total_actions * 100) if total_actions else 0,
                "total_transactions": self._count("transactions"),
                "average_pulse_score": int(round_half_up(sum(scores) / len(scores))) if scores else 0,
            }
        except Exception as e:
            logger.error(f"Error computing platform metrics: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to compute platform metrics: {str(e)}")

    def system_errors(self, severity: Optional[str] = None, resolved: Optional[bool] = None) -> List[Dict[str, Any]]:
        try:
            query = self.supabase.table("system_errors")\
                .select("*")\
                .order("last_occurrence_at", desc=True)
            if severity and severity != "all":
                query = query.eq("severity", severity)
            if resolved is not None:
                query = query.eq("resolved", resolved)
            rows = query.execute().data or []
        except Exception as e:
            logger.error(f"Error fetching system errors: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch errors")
        return [
            camelize({**row, "metadata": row.get("metadata") or {}, "occurrence_count": row.get("occurrence_count") or 1})
            for row in rows
        ]
