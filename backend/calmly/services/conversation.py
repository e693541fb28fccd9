"""
Conversation Service
====================
User-facing chat operations: list, read, start, and add to conversations.

Starting a conversation or adding a message commits the user's message
first, then queues a reply job. The caller never waits for the AI reply;
it shows up in the conversation once a reply worker has processed it.
"""

from __future__ import annotations

import logging
from typing import Optional

from calmly.config import Settings, get_settings
from calmly.models.conversation import Conversation, Message
from calmly.services.conversation_store import (
    ConversationNotFoundError,
    ConversationStore,
    new_message_id,
    utcnow,
)
from calmly.services.reply_queue import ReplyJob, ReplyQueue, get_reply_queue

logger = logging.getLogger(__name__)


class ConversationForbiddenError(Exception):
    """The conversation exists but belongs to another user."""

    def __init__(self, conversation_id: str) -> None:
        self.conversation_id = conversation_id
        super().__init__(f"Conversation {conversation_id} is not owned by the caller")


class ConversationService:
    def __init__(
        self,
        store: ConversationStore | None = None,
        reply_queue: ReplyQueue | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._store = store or ConversationStore()
        self._queue = reply_queue or get_reply_queue()
        self._settings = settings or get_settings()

    def list_conversations(self, user_id: str, limit: Optional[int] = None) -> list[Conversation]:
        return self._store.list_for_user(user_id, limit or self._settings.default_conversation_limit)

    def get_conversation(self, user_id: str, conversation_id: str) -> Conversation:
        """Fetch a conversation the caller owns.

        Raises ConversationNotFoundError if it does not exist and
        ConversationForbiddenError if another user owns it.
        """
        conversation = self._store.get(conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        if conversation.user_id != user_id:
            logger.warning(
                "User %s attempted to access conversation %s owned by another user",
                user_id,
                conversation_id,
            )
            raise ConversationForbiddenError(conversation_id)
        return conversation

    def start_conversation(
        self,
        user_id: str,
        initial_message: str,
        language: Optional[str] = None,
    ) -> Conversation:
        language = language or self._settings.default_language
        first = Message(
            id=new_message_id(),
            type="user",
            content=initial_message,
            timestamp=utcnow(),
            language=language,
        )
        conversation = self._store.create(user_id, first)

        self._queue.enqueue(ReplyJob(conversation.id, initial_message, language))
        logger.info("Started conversation %s for user %s", conversation.id, user_id)
        return conversation

    def add_message(
        self,
        user_id: str,
        conversation_id: str,
        content: str,
        voice_data: Optional[str] = None,
        language: Optional[str] = None,
    ) -> Message:
        # Ownership is checked before anything is written.
        self.get_conversation(user_id, conversation_id)

        language = language or self._settings.default_language
        message = Message(
            id=new_message_id(),
            type="user",
            content=content,
            timestamp=utcnow(),
            voice_data=voice_data,
            language=language,
        )
        self._store.append(conversation_id, message)

        self._queue.enqueue(ReplyJob(conversation_id, content, language))
        return message


def get_conversation_service() -> ConversationService:
    return ConversationService()
