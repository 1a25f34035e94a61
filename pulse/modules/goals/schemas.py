from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import date, datetime

GoalStatus = Literal["active", "completed", "at-risk"]


class GoalCreate(BaseModel):
    title: str = Field(min_length=1)
    goal_type: str = "custom"
    category: Optional[str] = None
    target_value: float = Field(ge=0)
    current_value: float = 0
    unit: Optional[str] = None
    timeframe: Optional[str] = None
    deadline: Optional[date] = None
    status: GoalStatus = "active"


class GoalUpdate(BaseModel):
    title: Optional[str] = None
    goal_type: Optional[str] = None
    category: Optional[str] = None
    target_value: Optional[float] = Field(default=None, ge=0)
    current_value: Optional[float] = None
    unit: Optional[str] = None
    timeframe: Optional[str] = None
    deadline: Optional[date] = None
    status: Optional[GoalStatus] = None


class GoalProgressUpdate(BaseModel):
    current_value: float


class GoalPace(BaseModel):
    status: str
    progress: int
    expected_progress: int
    needed_to_pace: int


class GoalResponse(BaseModel):
    id: str
    user_id: str
    title: str
    goal_type: Optional[str] = None
    category: Optional[str] = None
    target_value: Optional[float] = None
    current_value: Optional[float] = None
    unit: Optional[str] = None
    timeframe: Optional[str] = None
    deadline: Optional[date] = None
    status: Optional[str] = None
    confidence_score: Optional[int] = None
    confidence_level: Optional[int] = None
    pace: Optional[GoalPace] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
