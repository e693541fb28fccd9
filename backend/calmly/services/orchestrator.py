"""
Response Orchestrator
=====================
Turns a user's chat message into a persisted assistant reply.

    1. Load the conversation (ConversationNotFoundError if it is gone)
    2. Classify the user message with the keyword EmotionClassifier
    3. Build the prompt: system instruction + last N messages
    4. Call the completion service (temperature 0.7, 500 tokens, 1 choice)
    5. Append the reply, tagged with the classified emotion

If step 4 fails in any way (network error, non-2xx, empty text, AI
disabled) the fixed FALLBACK_RESPONSE is appended instead, tagged
neutral / 0.5. The failure is logged and never raised: the user always
gets exactly one reply per message.
"""

from __future__ import annotations

import logging

from calmly.config import Settings, get_settings
from calmly.models.conversation import EmotionAnalysis, Message
from calmly.services.completion import CompletionClient
from calmly.services.conversation_store import (
    ConversationNotFoundError,
    ConversationStore,
    new_message_id,
    utcnow,
)
from calmly.services.emotion import EmotionClassifier, get_emotion_classifier
from calmly.services.prompt import build_prompt

logger = logging.getLogger(__name__)

FALLBACK_RESPONSE = (
    "I'm here to listen and support you. "
    "Could you tell me more about how you're feeling right now?"
)
FALLBACK_EMOTION = EmotionAnalysis(primary_emotion="neutral", confidence=0.5)


class EmptyCompletionError(Exception):
    """The completion service answered but produced no usable text."""


class AIResponsesDisabledError(Exception):
    """The enable_ai_responses kill switch is off."""


class ResponseOrchestrator:
    """Generates and stores one assistant reply per user message."""

    def __init__(
        self,
        completion_client: CompletionClient,
        classifier: EmotionClassifier | None = None,
        store: ConversationStore | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._completion = completion_client
        self._classifier = classifier or get_emotion_classifier()
        self._store = store
        self._settings = settings or get_settings()

    @property
    def store(self) -> ConversationStore:
        # Built lazily so the orchestrator can be constructed before the
        # Supabase client is configured.
        if self._store is None:
            self._store = ConversationStore()
        return self._store

    async def generate_reply(self, conversation_id: str, user_message: str, language: str) -> str:
        conversation = self.store.get(conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)

        emotion = self._classifier.classify(user_message)

        try:
            if not self._settings.enable_ai_responses:
                raise AIResponsesDisabledError()

            prompt = build_prompt(
                conversation.messages,
                emotion,
                language,
                window=self._settings.context_window_messages,
            )
            reply = await self._completion.complete(prompt)
            if not reply or not reply.strip():
                raise EmptyCompletionError("No response generated")

            self._append_ai_message(conversation_id, reply, emotion, language)
        except AIResponsesDisabledError:
            logger.debug("AI responses disabled, sending fallback for conversation %s", conversation_id)
            return self._append_fallback(conversation_id, language)
        except Exception:
            logger.exception("Error generating AI response for conversation %s", conversation_id)
            return self._append_fallback(conversation_id, language)

        logger.info(
            "AI reply stored for conversation %s (emotion: %s, confidence: %.2f)",
            conversation_id,
            emotion.primary_emotion,
            emotion.confidence,
        )
        return reply

    def _append_fallback(self, conversation_id: str, language: str) -> str:
        self._append_ai_message(conversation_id, FALLBACK_RESPONSE, FALLBACK_EMOTION, language)
        return FALLBACK_RESPONSE

    def _append_ai_message(
        self,
        conversation_id: str,
        content: str,
        emotion: EmotionAnalysis,
        language: str,
    ) -> Message:
        message = Message(
            id=new_message_id(),
            type="ai",
            content=content,
            timestamp=utcnow(),
            mood=emotion.primary_emotion,
            confidence=emotion.confidence,
            language=language,
        )
        return self.store.append(conversation_id, message)
