from pydantic import BaseModel, ConfigDict, Field
from typing import List, Dict, Any, Optional


class IntegrationStatusResponse(BaseModel):
    integrations: List[Dict[str, Any]] = []


class GoogleCalendarRequest(BaseModel):
    action: Optional[str] = None


class GoogleCalendarTokenResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    has_token: bool = Field(alias="hasToken")
