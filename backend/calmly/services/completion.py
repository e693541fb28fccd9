"""
Completion Client
=================
Calls an OpenAI-compatible chat completions endpoint.

Constructed once at startup and handed to the ResponseOrchestrator, so
tests can swap in a fake without patching module globals. Errors are
raised, not swallowed: the orchestrator decides what a failure means
for the user.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import httpx

from calmly.config import Settings, get_settings
from calmly.models.conversation import ChatMessage

logger = logging.getLogger(__name__)


class CompletionServiceError(Exception):
    """Non-2xx response from the completion service."""

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Completion service error {status_code}: {body[:200]}")


class CompletionClient:
    """Sends role-tagged messages and returns the generated text."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self._api_url = f"{self._settings.completion_base_url.rstrip('/')}/chat/completions"

    async def complete(self, messages: Sequence[ChatMessage]) -> Optional[str]:
        """Request a single completion.

        Returns the first choice's text, or None if the response carries
        no text. Raises httpx.HTTPError on network failures and
        CompletionServiceError on non-2xx responses.
        """
        headers = {
            "authorization": f"Bearer {self._settings.completion_api_key}",
            "content-type": "application/json",
        }

        payload = {
            "model": self._settings.completion_model,
            "messages": [m.model_dump() for m in messages],
            "temperature": self._settings.completion_temperature,
            "max_tokens": self._settings.completion_max_tokens,
            "n": 1,
        }

        async with httpx.AsyncClient(timeout=self._settings.completion_timeout_seconds) as client:
            response = await client.post(self._api_url, headers=headers, json=payload)

        if not response.is_success:
            raise CompletionServiceError(response.status_code, response.text)

        data = response.json()
        choices = data.get("choices") or []
        if not choices:
            logger.warning("Completion response contained no choices")
            return None

        message = choices[0].get("message") or {}
        return message.get("content")
