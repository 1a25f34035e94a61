from pydantic import BaseModel
from typing import Optional, Dict, Any


class CurrentUserResponse(BaseModel):
    id: str
    session_id: Optional[str] = None
    email: Optional[str] = None
    is_admin: bool = False


class ProfileSyncResponse(BaseModel):
    success: bool = True
    user_id: str
    email: Optional[str] = None


class ClerkWebhookEvent(BaseModel):
    type: str
    data: Dict[str, Any] = {}
