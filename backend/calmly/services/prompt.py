"""
Prompt Builder
==============
Turns conversation history plus the classified emotion into the
role-tagged message list sent to the completion service.

Pure function, no I/O, so prompt changes can be tested without a client.
"""

from __future__ import annotations

from typing import Sequence

from calmly.models.conversation import ChatMessage, EmotionAnalysis, Message

DEFAULT_CONTEXT_WINDOW = 5

_SYSTEM_PROMPT = """\
You are a compassionate AI mental health support assistant. Your role is to:
1. Provide empathetic, non-judgmental support
2. Help users process their emotions
3. Suggest healthy coping strategies
4. Recognize crisis situations and recommend professional help
5. Maintain a warm, understanding tone

Current user emotional state: {emotion} (confidence: {confidence:.2f})
Language: {language}

Guidelines:
- Always validate the user's feelings
- Ask open-ended questions to encourage reflection
- Provide practical, actionable advice
- If detecting severe distress, gently suggest professional resources
- Keep responses concise but meaningful
- Reply in the language given above
"""


def build_system_prompt(emotion: EmotionAnalysis, language: str) -> str:
    return _SYSTEM_PROMPT.format(
        emotion=emotion.primary_emotion,
        confidence=emotion.confidence,
        language=language,
    )


def build_prompt(
    history: Sequence[Message],
    emotion: EmotionAnalysis,
    language: str,
    window: int = DEFAULT_CONTEXT_WINDOW,
) -> list[ChatMessage]:
    """System instruction followed by the last ``window`` messages, oldest first."""
    recent = list(history)[-window:] if window > 0 else []

    messages = [ChatMessage(role="system", content=build_system_prompt(emotion, language))]
    messages.extend(
        ChatMessage(
            role="user" if msg.type == "user" else "assistant",
            content=msg.content,
        )
        for msg in recent
    )
    return messages
