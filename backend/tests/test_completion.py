"""
Tests for CompletionClient
==========================
Covers:
- Request shape: URL, bearer auth, model, temperature, max_tokens, n=1, messages
- Returns the first choice's text
- No choices / null content → None
- Non-2xx → CompletionServiceError
- Network failure → httpx error propagates

Run: pytest tests/test_completion.py -v
"""

from __future__ import annotations

import json

import httpx
import pytest
import respx
from httpx import Response

from calmly.config import Settings
from calmly.models.conversation import ChatMessage
from calmly.services.completion import CompletionClient, CompletionServiceError

_URL = "https://llm.test/v1/chat/completions"

_SETTINGS = Settings(
    completion_base_url="https://llm.test/v1/",
    completion_api_key="sk-test",
    completion_model="gpt-4o-mini",
)

_MESSAGES = [
    ChatMessage(role="system", content="be kind"),
    ChatMessage(role="user", content="I feel anxious"),
]


def _completion_body(text):
    return {"choices": [{"index": 0, "message": {"role": "assistant", "content": text}}]}


class TestRequest:

    @pytest.mark.asyncio
    @respx.mock
    async def test_sends_expected_payload(self):
        route = respx.post(_URL).mock(return_value=Response(200, json=_completion_body("hi")))

        await CompletionClient(_SETTINGS).complete(_MESSAGES)

        request = route.calls.last.request
        assert request.headers["authorization"] == "Bearer sk-test"
        payload = json.loads(request.content)
        assert payload["model"] == "gpt-4o-mini"
        assert payload["temperature"] == 0.7
        assert payload["max_tokens"] == 500
        assert payload["n"] == 1
        assert payload["messages"] == [
            {"role": "system", "content": "be kind"},
            {"role": "user", "content": "I feel anxious"},
        ]


class TestResponse:

    @pytest.mark.asyncio
    @respx.mock
    async def test_returns_first_choice_text(self):
        respx.post(_URL).mock(return_value=Response(200, json=_completion_body("I'm here for you.")))
        assert await CompletionClient(_SETTINGS).complete(_MESSAGES) == "I'm here for you."

    @pytest.mark.asyncio
    @respx.mock
    async def test_no_choices_returns_none(self):
        respx.post(_URL).mock(return_value=Response(200, json={"choices": []}))
        assert await CompletionClient(_SETTINGS).complete(_MESSAGES) is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_null_content_returns_none(self):
        respx.post(_URL).mock(return_value=Response(200, json=_completion_body(None)))
        assert await CompletionClient(_SETTINGS).complete(_MESSAGES) is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_non_2xx_raises(self):
        respx.post(_URL).mock(return_value=Response(429, text="rate limited"))
        with pytest.raises(CompletionServiceError) as exc_info:
            await CompletionClient(_SETTINGS).complete(_MESSAGES)
        assert exc_info.value.status_code == 429

    @pytest.mark.asyncio
    @respx.mock
    async def test_network_error_propagates(self):
        respx.post(_URL).mock(side_effect=httpx.ConnectError("connection refused"))
        with pytest.raises(httpx.ConnectError):
            await CompletionClient(_SETTINGS).complete(_MESSAGES)
