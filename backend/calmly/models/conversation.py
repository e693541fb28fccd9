"""
Conversation Schemas
====================
Pydantic models for chat conversations and the records the reply
pipeline passes around.

A conversation's ``messages`` list is stored as a jsonb array on the
``conversations`` row and only ever grows. Messages are immutable once
appended; their order is append order.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Stored shapes
# ---------------------------------------------------------------------------

class Message(BaseModel):
    id: str
    type: Literal["user", "ai"]
    content: str
    timestamp: datetime
    mood: Optional[str] = Field(
        default=None,
        description="Emotion tag. Set on AI messages from the classified user message.",
    )
    confidence: Optional[float] = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Classifier confidence for ``mood`` on AI messages.",
    )
    voice_data: Optional[str] = Field(
        default=None,
        description="Storage reference of an uploaded voice clip, if any.",
    )
    language: Optional[str] = None


class Conversation(BaseModel):
    id: str
    user_id: str
    session_id: str
    messages: list[Message] = Field(default_factory=list)
    created_at: Optional[datetime] = None


# ---------------------------------------------------------------------------
# Reply pipeline records
# ---------------------------------------------------------------------------

class EmotionAnalysis(BaseModel):
    """Output of the keyword emotion classifier."""

    primary_emotion: str
    confidence: float = Field(..., ge=0.0, le=1.0)


class ChatMessage(BaseModel):
    """One role-tagged entry of a completion request."""

    role: Literal["system", "user", "assistant"]
    content: str


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class StartConversationRequest(BaseModel):
    initial_message: str = Field(..., min_length=1, max_length=4000)
    language: Optional[str] = Field(default=None, max_length=16)


class AddMessageRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=4000)
    voice_data: Optional[str] = Field(
        default=None,
        description="audio_file_id returned by POST /api/v1/voice/upload-url.",
    )
    language: Optional[str] = Field(default=None, max_length=16)
