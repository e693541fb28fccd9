"""
Shared test doubles
===================
An in-memory ConversationStore and a scriptable completion client so the
reply pipeline can be exercised end to end without Supabase or the network.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional, Sequence

import pytest

from calmly.config import Settings
from calmly.models.conversation import ChatMessage, Conversation, Message
from calmly.services.conversation_store import (
    ConversationNotFoundError,
    ConversationStore,
    new_session_id,
)


class InMemoryConversationStore(ConversationStore):
    """Dict-backed stand-in for the Supabase ``conversations`` table."""

    def __init__(self) -> None:
        self.rows: dict[str, Conversation] = {}
        self.append_calls = 0

    def get(self, conversation_id: str) -> Optional[Conversation]:
        conversation = self.rows.get(conversation_id)
        return conversation.model_copy(deep=True) if conversation else None

    def list_for_user(self, user_id: str, limit: int) -> list[Conversation]:
        owned = [c for c in self.rows.values() if c.user_id == user_id]
        owned.sort(key=lambda c: c.created_at, reverse=True)
        return owned[:limit]

    def count_for_user(self, user_id: str) -> int:
        return sum(1 for c in self.rows.values() if c.user_id == user_id)

    def create(self, user_id: str, first_message: Message) -> Conversation:
        conversation = Conversation(
            id=str(uuid.uuid4()),
            user_id=user_id,
            session_id=new_session_id(),
            messages=[first_message],
            created_at=datetime.now(timezone.utc),
        )
        self.rows[conversation.id] = conversation
        return conversation.model_copy(deep=True)

    def append(self, conversation_id: str, message: Message) -> Message:
        if conversation_id not in self.rows:
            raise ConversationNotFoundError(conversation_id)
        self.append_calls += 1
        self.rows[conversation_id].messages.append(message)
        return message


class FakeCompletionClient:
    """Returns a fixed reply, or raises, and records every prompt it receives."""

    def __init__(self, reply: Optional[str] = "That sounds hard. What happened?", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.prompts: list[list[ChatMessage]] = []

    async def complete(self, messages: Sequence[ChatMessage]) -> Optional[str]:
        self.prompts.append(list(messages))
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def memory_store() -> InMemoryConversationStore:
    return InMemoryConversationStore()


@pytest.fixture
def settings() -> Settings:
    return Settings(supabase_service_key="test-key", completion_api_key="test-key")


@pytest.fixture
def completion_client_factory():
    """Build FakeCompletionClient instances inside a test."""
    return FakeCompletionClient
