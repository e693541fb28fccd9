"""
Conversation Store
==================
Reads and writes rows of the ``conversations`` table.

Messages live in a jsonb array on the conversation row. Appending reads
the current row and patches the array with one extra element. There is
no row lock: two appends racing on the same conversation can lose one
write. Conversations are driven by a single user, so this is accepted.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from supabase import Client

from calmly.db.supabase import get_supabase_client
from calmly.models.conversation import Conversation, Message

logger = logging.getLogger(__name__)

_TABLE = "conversations"


class ConversationNotFoundError(Exception):
    """No conversation row with the given id."""

    def __init__(self, conversation_id: str) -> None:
        self.conversation_id = conversation_id
        super().__init__(f"Conversation {conversation_id} not found")


class StorageWriteError(Exception):
    """Supabase returned no row for an insert or update."""


def new_message_id() -> str:
    return f"msg_{uuid.uuid4().hex}"


def new_session_id() -> str:
    return f"session_{uuid.uuid4().hex}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConversationStore:
    """Persistence for conversations and their message lists."""

    def __init__(self, db: Client | None = None) -> None:
        self._db = db or get_supabase_client()

    def get(self, conversation_id: str) -> Optional[Conversation]:
        result = (
            self._db.table(_TABLE)
            .select("*")
            .eq("id", conversation_id)
            .maybe_single()
            .execute()
        )
        if result is None or not result.data:
            return None
        return Conversation(**result.data)

    def list_for_user(self, user_id: str, limit: int) -> list[Conversation]:
        """Most recently created conversations first."""
        result = (
            self._db.table(_TABLE)
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [Conversation(**row) for row in (result.data or [])]

    def count_for_user(self, user_id: str) -> int:
        result = (
            self._db.table(_TABLE)
            .select("id", count="exact")
            .eq("user_id", user_id)
            .execute()
        )
        return result.count or 0

    def create(self, user_id: str, first_message: Message) -> Conversation:
        row = {
            "user_id": user_id,
            "session_id": new_session_id(),
            "messages": [first_message.model_dump(mode="json")],
        }
        result = self._db.table(_TABLE).insert(row).execute()

        if not result.data:
            logger.error("Failed to insert conversation for user %s", user_id)
            raise StorageWriteError("Failed to create conversation")

        return Conversation(**result.data[0])

    def append(self, conversation_id: str, message: Message) -> Message:
        """Append one message to the latest stored version of the conversation."""
        conversation = self.get(conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)

        messages = [m.model_dump(mode="json") for m in conversation.messages]
        messages.append(message.model_dump(mode="json"))

        result = (
            self._db.table(_TABLE)
            .update({"messages": messages})
            .eq("id", conversation_id)
            .execute()
        )

        if not result.data:
            logger.error("Failed to append message to conversation %s", conversation_id)
            raise StorageWriteError("Failed to save message")

        return message
