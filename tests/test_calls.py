import asyncio
import json

import httpx
import pytest

from pulse.core.errors import ApiError
from pulse.modules.calls.dialer import CallDialer
from pulse.modules.calls.routes import get_call_campaign_service
from pulse.modules.calls.schemas import CallCampaignRequest
from pulse.modules.calls.service import CallCampaignService
from tests.conftest import USER_ID

CONTACTS = [
    {"name": "Sam Buyer", "phone": "+15550001", "email": "sam@example.com"},
    {"name": "Kim Seller", "phone": "+15550002", "notes": "expired listing"},
    {"name": "Lee Lead", "phone": "+15550003"},
]


def dialer(handler, api_key="xi-test"):
    return CallDialer(api_url="https://voice.test/v1", api_key=api_key, timeout=5,
                      transport=httpx.MockTransport(handler))


def accept_all(request):
    return httpx.Response(200, json={"status": "queued"})


def campaign(**fields):
    return CallCampaignRequest(**{"contacts": CONTACTS, "callType": "cold_call", "campaignName": "Spring", **fields})


@pytest.fixture
def sales_agent(fake_db):
    fake_db.rows("agent_config").append({
        "id": "cfg-1", "user_id": USER_ID, "agent_type": "sales_agent",
        "eleven_labs_agent_id": "agent_abc", "settings": {"twilio_phone_number": "+15559999"},
    })
    return fake_db


class TestDialer:
    def test_request_shape(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["key"] = request.headers["xi-api-key"]
            seen["body"] = json.loads(request.content)
            return accept_all(request)

        d = dialer(handler)

        async def run():
            async with d.client() as client:
                await d.place_call(client, "agent_abc", "+15550001", "+15559999", {"user_id": USER_ID})

        asyncio.run(run())
        assert seen["url"] == "https://voice.test/v1/convai/agents/agent_abc/calls"
        assert seen["key"] == "xi-test"
        assert seen["body"] == {"phone_number": "+15550001", "from_number": "+15559999", "metadata": {"user_id": USER_ID}}

    def test_upstream_error(self):
        d = dialer(lambda r: httpx.Response(422, text="bad number"))

        async def run():
            async with d.client() as client:
                await d.place_call(client, "agent_abc", "nope", None, {})

        with pytest.raises(ApiError) as exc:
            asyncio.run(run())
        assert exc.value.code == "UPSTREAM_ERROR"

    def test_missing_key(self):
        with pytest.raises(ApiError) as exc:
            dialer(accept_all, api_key="").client()
        assert exc.value.status_code == 500


class TestCallCampaignService:
    def test_all_calls_queued(self, sales_agent):
        result = asyncio.run(CallCampaignService(sales_agent, dialer(accept_all)).start_campaign(USER_ID, campaign()))
        assert result.success is True
        assert (result.total_contacts, result.success_count, result.failure_count) == (3, 3, 0)
        stored = sales_agent.rows("call_campaigns")[0]
        assert result.campaign_id == stored["id"]
        assert stored["total_contacts"] == 3
        logs = sales_agent.rows("call_logs")
        assert [log["status"] for log in logs] == ["queued"] * 3
        assert all(log["metadata"]["campaign_id"] == stored["id"] for log in logs)
        assert logs[0]["metadata"]["email"] == "sam@example.com"

    def test_failed_calls_are_counted_and_marked(self, sales_agent):
        def handler(request):
            if json.loads(request.content)["phone_number"] == "+15550002":
                return httpx.Response(500, text="carrier down")
            return accept_all(request)

        result = asyncio.run(CallCampaignService(sales_agent, dialer(handler)).start_campaign(USER_ID, campaign()))
        assert (result.success_count, result.failure_count) == (2, 1)
        by_phone = {log["phone_number"]: log["status"] for log in sales_agent.rows("call_logs")}
        assert by_phone == {"+15550001": "queued", "+15550002": "failed", "+15550003": "queued"}

    def test_caller_id_prefers_agent_phone(self, sales_agent):
        numbers = []

        def handler(request):
            numbers.append(json.loads(request.content)["from_number"])
            return accept_all(request)

        service = CallCampaignService(sales_agent, dialer(handler))
        asyncio.run(service.start_campaign(USER_ID, campaign(contacts=CONTACTS[:1], agentData={"agent_phone": "+15551111"})))
        asyncio.run(service.start_campaign(USER_ID, campaign(contacts=CONTACTS[:1])))
        assert numbers == ["+15551111", "+15559999"]

    def test_unconfigured_agent_requires_onboarding(self, fake_db):
        result = asyncio.run(CallCampaignService(fake_db, dialer(accept_all)).start_campaign(USER_ID, campaign()))
        assert result.success is False
        assert result.requires_onboarding is True
        assert fake_db.rows("call_campaigns") == []

    def test_agent_without_voice_id_requires_onboarding(self, fake_db):
        fake_db.rows("agent_config").append({"user_id": USER_ID, "agent_type": "sales_agent"})
        result = asyncio.run(CallCampaignService(fake_db, dialer(accept_all)).start_campaign(USER_ID, campaign()))
        assert result.requires_onboarding is True

    def test_no_contacts(self, sales_agent):
        with pytest.raises(ApiError) as exc:
            asyncio.run(CallCampaignService(sales_agent, dialer(accept_all)).start_campaign(USER_ID, campaign(contacts=[])))
        assert exc.value.code == "MISSING_FIELD"

    def test_missing_key_writes_nothing(self, sales_agent):
        with pytest.raises(ApiError):
            asyncio.run(CallCampaignService(sales_agent, dialer(accept_all, api_key="")).start_campaign(USER_ID, campaign()))
        assert sales_agent.rows("call_campaigns") == []
        assert sales_agent.rows("call_logs") == []

    def test_campaign_insert_failure_still_dials(self, sales_agent):
        sales_agent.fail("call_campaigns", "insert")
        result = asyncio.run(CallCampaignService(sales_agent, dialer(accept_all)).start_campaign(USER_ID, campaign()))
        assert result.campaign_id is None
        assert result.success_count == 3

    def test_call_log_failure_skips_contact(self, sales_agent):
        sales_agent.fail("call_logs", "insert", when=lambda payload: payload.get("phone_number") == "+15550003")
        result = asyncio.run(CallCampaignService(sales_agent, dialer(accept_all)).start_campaign(USER_ID, campaign()))
        assert (result.success_count, result.failure_count) == (2, 1)


class TestCallCampaignRoute:
    def test_start_campaign(self, client, sales_agent):
        from pulse.main import app
        app.dependency_overrides[get_call_campaign_service] = lambda: CallCampaignService(sales_agent, dialer(accept_all))
        response = client.post("/api/v1/calls/campaigns", json={"contacts": CONTACTS, "callType": "follow_up"})
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert (body["totalContacts"], body["successCount"], body["failureCount"]) == (3, 3, 0)
        assert body["campaignId"]

    def test_requires_onboarding_shape(self, client, fake_db):
        from pulse.main import app
        app.dependency_overrides[get_call_campaign_service] = lambda: CallCampaignService(fake_db, dialer(accept_all))
        body = client.post("/api/v1/calls/campaigns", json={"contacts": CONTACTS}).json()
        assert body["success"] is False
        assert body["requiresOnboarding"] is True

    def test_contact_without_phone_is_422(self, client):
        response = client.post("/api/v1/calls/campaigns", json={"contacts": [{"name": "No Phone"}]})
        assert response.status_code == 422
