from supabase import Client
from pulse.core import errors
from pulse.modules.chat.gateway import ChatGateway
from pulse.modules.chat.personas import PERSONAS, Persona
from pulse.modules.goals.calculator import to_datetime
from typing import Any, Dict, List, Optional, Tuple
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

CONVERSATIONS_TABLE = "ai_agent_conversations"


def get_persona(agent_type: str) -> Persona:
    persona = PERSONAS.get(agent_type)
    if persona is None:
        raise errors.not_found(f"Unknown agent: {agent_type}")
    return persona


def created_today(row: Dict[str, Any], now: Optional[datetime] = None) -> bool:
    created = to_datetime(row.get("created_at"))
    if created is None:
        return False
    now = now or datetime.now(timezone.utc)
    return created.astimezone(timezone.utc).date() == now.astimezone(timezone.utc).date()


class ChatService:
    def __init__(self, supabase: Client, gateway: Optional[ChatGateway] = None):
        self.supabase = supabase
        self.gateway = gateway or ChatGateway()

    def _maybe_single(self, query) -> Optional[Dict[str, Any]]:
        result = query.maybe_single().execute()
        return result.data if result else None

    def _read(self, key: str, user_id: str, persona: Persona):
        if key == "profile":
            return self._maybe_single(self.supabase.table("profiles").select("*").eq("id", user_id))
        if key == "guidelines":
            return self.supabase.table("user_guidelines")\
                .select("*")\
                .eq("user_id", user_id)\
                .eq("agent_type", persona.agent_type)\
                .execute().data or []
        if key == "graph_context":
            return self._maybe_single(self.supabase.table("graph_context").select("*").eq("user_id", user_id))
        if key == "market_config":
            return self._maybe_single(self.supabase.table("market_config").select("*").eq("user_id", user_id))
        if key == "recent_content":
            return self.supabase.table("generated_content")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .limit(5)\
                .execute().data or []
        if key == "transactions":
            return self.supabase.table("transactions")\
                .select("*")\
                .eq("user_id", user_id)\
                .eq("status", "active")\
                .order("created_at", desc=True)\
                .limit(5)\
                .execute().data or []
        raise ValueError(f"Unknown context read: {key}")

    def load_context(self, user_id: str, persona: Persona) -> Dict[str, Any]:
        """Rows for the persona's prompt. A failed read leaves that section out of the prompt."""
        rows: Dict[str, Any] = {}
        for key in ("profile", "guidelines") + persona.reads:
            try:
                rows[key] = self._read(key, user_id, persona)
            except Exception as e:
                logger.warning(f"{persona.name} context read {key} failed for {user_id}: {e}")
                rows[key] = None
        return rows

    def _find_conversation(self, user_id: str, persona: Persona, conversation_id: Optional[str]) -> Optional[Dict[str, Any]]:
        query = self.supabase.table(CONVERSATIONS_TABLE)\
            .select("*")\
            .eq("user_id", user_id)\
            .eq("agent_type", persona.agent_type)
        if conversation_id:
            return self._maybe_single(query.eq("id", conversation_id))
        result = query.order("created_at", desc=True).limit(1).execute()
        return result.data[0] if result.data else None

    def save_turn(self, user_id: str, persona: Persona, conversation_id: Optional[str],
                  turn: List[Dict[str, str]], now: Optional[datetime] = None) -> Optional[str]:
        """Append the turn to today's conversation for this persona, or start a new one."""
        now = now or datetime.now(timezone.utc)
        try:
            existing = self._find_conversation(user_id, persona, conversation_id)
            if existing and created_today(existing, now):
                result = self.supabase.table(CONVERSATIONS_TABLE)\
                    .update({"messages": (existing.get("messages") or []) + turn, "updated_at": now.isoformat()})\
                    .eq("id", existing["id"])\
                    .eq("user_id", user_id)\
                    .execute()
            else:
                result = self.supabase.table(CONVERSATIONS_TABLE).insert({
                    "user_id": user_id,
                    "agent_type": persona.agent_type,
                    "messages": turn,
                    "created_at": now.isoformat(),
                    "updated_at": now.isoformat(),
                }).execute()
            return result.data[0]["id"] if result.data else None
        except Exception as e:
            logger.error(f"Failed to save {persona.name} conversation for {user_id}: {e}")
            return None

    async def chat(self, agent_type: str, user_id: str, prompt: Optional[str],
                   conversation_id: Optional[str] = None,
                   history: Optional[List[Dict[str, Any]]] = None) -> Tuple[str, Optional[str]]:
        persona = get_persona(agent_type)
        if not prompt or not prompt.strip():
            raise errors.missing_field("Missing userPrompt in request body")

        rows = self.load_context(user_id, persona)
        messages = [{"role": "system", "content": persona.build_prompt(rows)}]
        messages += [m for m in history or [] if m.get("role") in ("user", "assistant")]
        messages.append({"role": "user", "content": prompt})

        logger.info(f"{persona.name} chat for {user_id} ({len(messages)} messages)")
        reply = await self.gateway.complete(messages)

        turn = [{"role": "user", "content": prompt}, {"role": "assistant", "content": reply}]
        saved_id = self.save_turn(user_id, persona, conversation_id, turn)
        return reply, saved_id or conversation_id
