"""
HTTP client for the remote text-generation function.

The function takes ``{"prompt": ...}`` and answers ``{"generatedText": ...}``
or ``{"error": ...}``. Every failure comes back as an unsuccessful
AIResponse so the editor can show a notice and leave the note alone.
"""

import logging

import httpx

from ..core.context import CONTEXT_MARKER
from ..core.model import AIResponse
from ..core.ports import TextGenerator
from ..logs import log_event

logger = logging.getLogger(__name__)

FAILED_TEXT = "Sorry, I couldn't generate a response. Please try again later."
EMPTY_TEXT = "Sorry, I received an empty response. Please try again."
UNEXPECTED_TEXT = "Sorry, an unexpected error occurred. Please try again later."


class HttpTextGenerator(TextGenerator):
    def __init__(
        self,
        endpoint: str,
        api_key: str | None = None,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            endpoint: URL of the generation function
            api_key: Sent as a bearer token when set
            timeout: Request timeout in seconds (host-level, not enforced by the editor)
            transport: Optional httpx transport, e.g. httpx.MockTransport in tests
        """
        self.endpoint = endpoint
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def generate(self, prompt: str) -> AIResponse:
        log_event(logger, logging.INFO, "ai_request", chars=len(prompt),
                  has_context=CONTEXT_MARKER in prompt)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    self.endpoint, json={"prompt": prompt}, headers=self._headers()
                )
        except httpx.TimeoutException as e:
            log_event(logger, logging.WARNING, "ai_timeout", error=e)
            return AIResponse(text=FAILED_TEXT, success=False, error="Request timed out")
        except httpx.HTTPError as e:
            log_event(logger, logging.WARNING, "ai_transport_error", error=e)
            return AIResponse(text=FAILED_TEXT, success=False, error=str(e))

        try:
            data = response.json()
        except ValueError:
            data = None

        if response.status_code >= 400:
            detail = data.get("error") if isinstance(data, dict) else None
            error = detail or f"HTTP {response.status_code}"
            log_event(logger, logging.WARNING, "ai_error_response",
                      status=response.status_code, error=error)
            return AIResponse(text=FAILED_TEXT, success=False, error=error)

        if not isinstance(data, dict):
            log_event(logger, logging.WARNING, "ai_bad_payload", status=response.status_code)
            return AIResponse(text=UNEXPECTED_TEXT, success=False, error="Invalid JSON payload")

        if data.get("error"):
            return AIResponse(text=FAILED_TEXT, success=False, error=str(data["error"]))

        generated = data.get("generatedText")
        if not generated:
            log_event(logger, logging.WARNING, "ai_empty_response")
            return AIResponse(text=EMPTY_TEXT, success=False)

        log_event(logger, logging.INFO, "ai_response", chars=len(generated))
        return AIResponse(text=generated, success=True)
