from supabase import Client
from pulse.core import errors
from pulse.modules.calls.dialer import CallDialer
from pulse.modules.calls.schemas import CallCampaignRequest, CallCampaignResponse, CallContact
from typing import Any, Dict, List, Optional
import asyncio
import logging

logger = logging.getLogger(__name__)

SALES_AGENT = "sales_agent"


class CallCampaignService:
    """Queues one outbound AI call per contact through the user's configured sales agent."""

    def __init__(self, supabase: Client, dialer: Optional[CallDialer] = None):
        self.supabase = supabase
        self.dialer = dialer or CallDialer()

    def get_sales_agent(self, user_id: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table("agent_config")\
            .select("*")\
            .eq("user_id", user_id)\
            .eq("agent_type", SALES_AGENT)\
            .maybe_single()\
            .execute()
        config = result.data if result else None
        if not config or not config.get("eleven_labs_agent_id"):
            return None
        return config

    def _create_campaign(self, user_id: str, request: CallCampaignRequest, total: int) -> Optional[str]:
        try:
            result = self.supabase.table("call_campaigns").insert({
                "user_id": user_id,
                "campaign_name": request.campaign_name,
                "call_type": request.call_type,
                "total_contacts": total,
                "status": "active",
            }).execute()
            return result.data[0]["id"] if result.data else None
        except Exception as e:
            logger.error(f"Failed to create call campaign for {user_id}: {e}")
            return None

    def _queue_log(self, user_id: str, contact: CallContact, request: CallCampaignRequest,
                   campaign_id: Optional[str]) -> Optional[str]:
        result = self.supabase.table("call_logs").insert({
            "user_id": user_id,
            "contact_name": contact.name,
            "phone_number": contact.phone,
            "call_type": request.call_type,
            "status": "queued",
            "metadata": {
                "campaign_id": campaign_id,
                "campaign_name": request.campaign_name,
                "email": contact.email,
                "notes": contact.notes,
            },
        }).execute()
        return result.data[0]["id"] if result.data else None

    def _mark_failed(self, user_id: str, log_id: Optional[str]) -> None:
        if not log_id:
            return
        try:
            self.supabase.table("call_logs")\
                .update({"status": "failed"})\
                .eq("id", log_id)\
                .eq("user_id", user_id)\
                .execute()
        except Exception as e:
            logger.error(f"Could not mark call log {log_id} failed: {e}")

    async def start_campaign(self, user_id: str, request: CallCampaignRequest) -> CallCampaignResponse:
        contacts = request.contacts or []
        if not contacts:
            raise errors.missing_field("Contacts array is required")

        agent = self.get_sales_agent(user_id)
        if agent is None:
            return CallCampaignResponse(
                success=False,
                requires_onboarding=True,
                error="Please complete AI Sales Agent onboarding first",
            )
        client = self.dialer.client()

        campaign_id = self._create_campaign(user_id, request, len(contacts))
        from_number = request.agent_data.get("agent_phone") or (agent.get("settings") or {}).get("twilio_phone_number")

        queued: List[tuple] = []
        for contact in contacts:
            try:
                queued.append((contact, self._queue_log(user_id, contact, request, campaign_id)))
            except Exception as e:
                logger.error(f"Could not queue call for {contact.name}: {e}")

        async def dial(contact: CallContact, log_id: Optional[str]) -> bool:
            try:
                await self.dialer.place_call(
                    client, agent["eleven_labs_agent_id"], contact.phone, from_number,
                    {"contact_name": contact.name, "call_type": request.call_type, "user_id": user_id},
                )
                return True
            except errors.ApiError as e:
                logger.error(f"Call to {contact.name} was not queued: {e.detail}")
                self._mark_failed(user_id, log_id)
                return False

        async with client:
            results = await asyncio.gather(*(dial(contact, log_id) for contact, log_id in queued))

        success_count = sum(1 for ok in results if ok)
        logger.info(f"Call campaign {campaign_id} for {user_id}: {success_count}/{len(contacts)} queued")
        return CallCampaignResponse(
            success=True,
            campaign_id=campaign_id,
            total_contacts=len(contacts),
            success_count=success_count,
            failure_count=len(contacts) - success_count,
            message=f"Campaign initiated: {success_count}/{len(contacts)} calls queued",
        )
