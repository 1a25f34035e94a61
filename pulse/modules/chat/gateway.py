"""
OpenAI-compatible chat-completions client for the LLM gateway.

One attempt per call; failures are mapped to ApiError codes the client can
branch on and are never retried here.
"""

from pulse.config.settings import settings
from pulse.core import errors
from typing import Any, Dict, List, Optional
import httpx
import logging

logger = logging.getLogger(__name__)

# Gateway status -> (status we return, code)
STATUS_MAP = {
    401: (401, errors.UNAUTHORIZED),
    402: (402, errors.PAYMENT_REQUIRED),
    429: (429, errors.RATE_LIMIT_EXCEEDED),
}

MESSAGES = {
    errors.UNAUTHORIZED: "AI gateway rejected the credentials",
    errors.PAYMENT_REQUIRED: "AI credits exhausted. Please add credits to continue.",
    errors.RATE_LIMIT_EXCEEDED: "Rate limit exceeded. Please try again in a moment.",
}


class ChatGateway:
    def __init__(self, url: Optional[str] = None, api_key: Optional[str] = None,
                 model: Optional[str] = None, timeout: Optional[float] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = url or settings.ai_gateway_url
        self.api_key = api_key if api_key is not None else settings.ai_gateway_api_key
        self.model = model or settings.ai_model
        self.timeout = timeout or settings.ai_timeout_seconds
        self.transport = transport

    async def complete(self, messages: List[Dict[str, Any]]) -> str:
        """Send the messages and return the assistant reply text."""
        if not self.api_key:
            raise errors.ApiError(500, errors.UPSTREAM_ERROR, "AI gateway API key not configured")
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                r = await client.post(
                    self.url,
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                    json={"model": self.model, "messages": messages},
                )
        except httpx.TimeoutException:
            logger.error("AI gateway timed out")
            raise errors.ApiError(502, errors.UPSTREAM_ERROR, "AI gateway timed out")
        except httpx.HTTPError as e:
            logger.error(f"AI gateway request failed: {e}")
            raise errors.ApiError(502, errors.UPSTREAM_ERROR, "Could not reach AI gateway")

        if r.status_code != 200:
            logger.error(f"AI gateway error: {r.status_code} {r.text[:500]}")
            if r.status_code in STATUS_MAP:
                status_code, code = STATUS_MAP[r.status_code]
                raise errors.ApiError(status_code, code, MESSAGES[code])
            raise errors.ApiError(502, errors.UPSTREAM_ERROR, f"AI gateway error: {r.status_code}")

        try:
            return r.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError):
            logger.error(f"Unexpected AI gateway payload: {r.text[:500]}")
            raise errors.ApiError(502, errors.UPSTREAM_ERROR, "Malformed AI gateway response")
