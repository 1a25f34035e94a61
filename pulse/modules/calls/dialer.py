"""
ElevenLabs conversational-AI client for outbound calls.

The caller owns the httpx.AsyncClient so a whole campaign is dialed over one
connection pool.
"""

from pulse.config.settings import settings
from pulse.core import errors
from typing import Any, Dict, Optional
import httpx
import logging

logger = logging.getLogger(__name__)


class CallDialer:
    def __init__(self, api_url: Optional[str] = None, api_key: Optional[str] = None,
                 timeout: Optional[float] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_url = (api_url or settings.elevenlabs_api_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.elevenlabs_api_key
        self.timeout = timeout or settings.elevenlabs_timeout_seconds
        self.transport = transport

    def client(self) -> httpx.AsyncClient:
        if not self.api_key:
            raise errors.ApiError(500, errors.UPSTREAM_ERROR, "ElevenLabs API key not configured")
        return httpx.AsyncClient(
            timeout=self.timeout,
            transport=self.transport,
            headers={"xi-api-key": self.api_key, "Content-Type": "application/json"},
        )

    async def place_call(self, client: httpx.AsyncClient, agent_id: str, phone_number: str,
                         from_number: Optional[str], metadata: Dict[str, Any]) -> None:
        """Ask the agent to call one number. Raises ApiError when the call was not queued."""
        try:
            r = await client.post(
                f"{self.api_url}/convai/agents/{agent_id}/calls",
                json={"phone_number": phone_number, "from_number": from_number, "metadata": metadata},
            )
        except httpx.TimeoutException:
            raise errors.ApiError(502, errors.UPSTREAM_ERROR, "ElevenLabs timed out")
        except httpx.HTTPError as e:
            raise errors.ApiError(502, errors.UPSTREAM_ERROR, f"Could not reach ElevenLabs: {e}")
        if r.status_code >= 300:
            raise errors.ApiError(502, errors.UPSTREAM_ERROR, f"ElevenLabs error {r.status_code}: {r.text[:200]}")
