from fastapi import APIRouter, Depends
from pulse.core.dependencies import get_current_user_id
from pulse.database.supabase_client import get_supabase
from pulse.modules.chat.schemas import ChatRequest, ChatResponse
from pulse.modules.chat.service import ChatService
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/chat", tags=["chat"])


def get_chat_service(supabase: Client = Depends(get_supabase)) -> ChatService:
    return ChatService(supabase)


@router.post("/{agent_type}", response_model=ChatResponse)
async def chat_with_agent(
    agent_type: str,
    body: ChatRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: ChatService = Depends(get_chat_service)
):
    """Send one message to an agent persona (executive_assistant, content_agent, transaction_coordinator)"""
    reply, conversation_id = await service.chat(
        agent_type,
        user_data["id"],
        body.prompt,
        conversation_id=body.conversation_id,
        history=body.conversation_history,
    )
    return ChatResponse(response=reply, conversation_id=conversation_id)
