"""
Tests for ResponseOrchestrator
==============================
Covers:
- Happy path: reply appended with classified emotion, text returned
- Prompt built from the stored history plus classified emotion and language
- Upstream failures (network error, non-2xx, empty / blank completion)
  → fallback text appended as neutral / 0.5, returned, never raised
- Kill switch: completion service skipped, fallback appended
- Exactly one append per call in every case
- Missing conversation → ConversationNotFoundError, nothing appended

Run: pytest tests/test_orchestrator.py -v
"""

from __future__ import annotations

from datetime import datetime, timezone

import httpx
import pytest

from calmly.config import Settings
from calmly.models.conversation import Message
from calmly.services.completion import CompletionServiceError
from calmly.services.conversation_store import ConversationNotFoundError
from calmly.services.orchestrator import FALLBACK_RESPONSE, ResponseOrchestrator

_USER_ID = "user-1"
_ANXIOUS = "I feel anxious and scared about tomorrow"


def _seed(store, content: str = _ANXIOUS) -> str:
    first = Message(
        id="msg_first",
        type="user",
        content=content,
        timestamp=datetime(2026, 3, 1, tzinfo=timezone.utc),
        language="en",
    )
    return store.create(_USER_ID, first).id


def _orchestrator(client, store, settings: Settings) -> ResponseOrchestrator:
    return ResponseOrchestrator(completion_client=client, store=store, settings=settings)


class TestHappyPath:

    @pytest.mark.asyncio
    async def test_reply_appended_with_emotion(self, memory_store, settings, completion_client_factory):
        conversation_id = _seed(memory_store)
        client = completion_client_factory(reply="That sounds really hard.")

        reply = await _orchestrator(client, memory_store, settings).generate_reply(
            conversation_id, _ANXIOUS, "en"
        )

        assert reply == "That sounds really hard."
        messages = memory_store.get(conversation_id).messages
        assert len(messages) == 2
        ai = messages[-1]
        assert ai.type == "ai"
        assert ai.content == "That sounds really hard."
        assert ai.mood == "anxiety"
        assert ai.confidence == pytest.approx(2 / 3)
        assert ai.language == "en"

    @pytest.mark.asyncio
    async def test_prompt_uses_history_and_language(self, memory_store, settings, completion_client_factory):
        conversation_id = _seed(memory_store)
        client = completion_client_factory()

        await _orchestrator(client, memory_store, settings).generate_reply(
            conversation_id, _ANXIOUS, "fr"
        )

        prompt = client.prompts[0]
        assert prompt[0].role == "system"
        assert "anxiety" in prompt[0].content
        assert "Language: fr" in prompt[0].content
        assert prompt[1].role == "user"
        assert prompt[1].content == _ANXIOUS


class TestFallback:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "client_kwargs",
        [
            {"error": httpx.ConnectError("connection refused")},
            {"error": CompletionServiceError(500, "boom")},
            {"reply": None},
            {"reply": ""},
            {"reply": "   \n"},
        ],
        ids=["network", "http-500", "none", "empty", "blank"],
    )
    async def test_failure_appends_fallback(
        self, client_kwargs, memory_store, settings, completion_client_factory
    ):
        conversation_id = _seed(memory_store)
        client = completion_client_factory(**client_kwargs)

        reply = await _orchestrator(client, memory_store, settings).generate_reply(
            conversation_id, _ANXIOUS, "en"
        )

        assert reply == FALLBACK_RESPONSE
        assert memory_store.append_calls == 1
        ai = memory_store.get(conversation_id).messages[-1]
        assert ai.type == "ai"
        assert ai.content == FALLBACK_RESPONSE
        assert ai.mood == "neutral"
        assert ai.confidence == 0.5

    @pytest.mark.asyncio
    async def test_kill_switch_skips_completion(self, memory_store, completion_client_factory):
        conversation_id = _seed(memory_store)
        client = completion_client_factory()
        disabled = Settings(enable_ai_responses=False)

        reply = await _orchestrator(client, memory_store, disabled).generate_reply(
            conversation_id, _ANXIOUS, "en"
        )

        assert reply == FALLBACK_RESPONSE
        assert client.prompts == []
        assert memory_store.append_calls == 1


class TestExactlyOneAppend:

    @pytest.mark.asyncio
    async def test_success_appends_once(self, memory_store, settings, completion_client_factory):
        conversation_id = _seed(memory_store)
        await _orchestrator(completion_client_factory(), memory_store, settings).generate_reply(
            conversation_id, _ANXIOUS, "en"
        )
        assert memory_store.append_calls == 1

    @pytest.mark.asyncio
    async def test_missing_conversation_raises_and_appends_nothing(
        self, memory_store, settings, completion_client_factory
    ):
        client = completion_client_factory()

        with pytest.raises(ConversationNotFoundError):
            await _orchestrator(client, memory_store, settings).generate_reply(
                "does-not-exist", "hello", "en"
            )

        assert memory_store.append_calls == 0
        assert client.prompts == []
