from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any


class CallContact(BaseModel):
    name: Optional[str] = None
    phone: str = Field(min_length=1)
    email: Optional[str] = None
    notes: Optional[str] = None


class CallCampaignRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    contacts: Optional[List[CallContact]] = None
    call_type: Optional[str] = Field(default=None, alias="callType")
    campaign_name: Optional[str] = Field(default=None, alias="campaignName")
    agent_data: Dict[str, Any] = Field(default={}, alias="agentData")


class CallCampaignResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    requires_onboarding: bool = Field(default=False, alias="requiresOnboarding")
    error: Optional[str] = None
    campaign_id: Optional[str] = Field(default=None, alias="campaignId")
    total_contacts: int = Field(default=0, alias="totalContacts")
    success_count: int = Field(default=0, alias="successCount")
    failure_count: int = Field(default=0, alias="failureCount")
    message: Optional[str] = None
