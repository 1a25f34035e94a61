from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_prompt: Optional[str] = Field(default=None, alias="userPrompt")
    message: Optional[str] = None
    conversation_id: Optional[str] = Field(default=None, alias="conversationId")
    conversation_history: List[Dict[str, Any]] = Field(default=[], alias="conversationHistory")

    @property
    def prompt(self) -> Optional[str]:
        return self.user_prompt or self.message


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    response: str
    conversation_id: Optional[str] = Field(default=None, alias="conversationId")
