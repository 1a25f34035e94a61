from pydantic import BaseModel
from typing import Optional, List, Dict, Any


class OnboardingStepInfo(BaseModel):
    id: str
    title: str


class OnboardingModuleInfo(BaseModel):
    key: str
    title: str
    steps: List[OnboardingStepInfo]


class OnboardingStateResponse(BaseModel):
    module: Optional[str] = None
    step_index: int = 0
    step_id: Optional[str] = None
    complete: bool = False
    redirect: Optional[str] = None
    active_modules: List[str]
    completed_steps: List[str] = []
    step_data: Dict[str, Any] = {}
    modules: List[OnboardingModuleInfo] = []


class OnboardingPositionRequest(BaseModel):
    module: str
    step_index: int


class OnboardingAdvanceRequest(OnboardingPositionRequest):
    step_data: Optional[Dict[str, Any]] = None


class OnboardingProgressRequest(BaseModel):
    progress_data: Optional[Dict[str, Any]] = None


class OnboardingProgressResponse(BaseModel):
    success: bool = True
    data: Optional[Dict[str, Any]] = None
