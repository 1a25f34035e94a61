from pydantic import BaseModel
from typing import Optional, List, Dict, Any


class PlatformMetricsResponse(BaseModel):
    total_users: int
    active_users: int
    total_goals: int
    total_actions: int
    completed_actions: int
    completion_rate: float
    total_transactions: int
    average_pulse_score: int


class SystemErrorsRequest(BaseModel):
    severity: Optional[str] = None
    resolved: Optional[bool] = None


class SystemErrorsResponse(BaseModel):
    errors: List[Dict[str, Any]] = []
