"""
Emotion Classifier
==================
Maps a chat message to a coarse emotion label with a confidence score.

This is a keyword presence heuristic, not a model:

    1. Lower-case the message.
    2. For each category, count how many of its keywords appear as
       substrings. Repeats of a keyword count once.
    3. The category with the strictly greatest count wins. Ties keep the
       category listed first in EMOTION_KEYWORDS.
    4. confidence = min(score / 3, 1). Three matched keywords saturate it.

No score above zero means "neutral" with confidence 0.

Known limitations: no negation ("not anxious" scores as anxiety), no
stemming, English keywords only even though chats may be in other
languages. The label only steers the reply prompt, so these are accepted.
"""

from __future__ import annotations

from calmly.models.conversation import EmotionAnalysis

# Order matters: it is the tie-break order.
EMOTION_KEYWORDS: dict[str, tuple[str, ...]] = {
    "anxiety": ("anxious", "worried", "nervous", "panic", "fear", "scared"),
    "depression": ("sad", "depressed", "hopeless", "empty", "worthless", "down"),
    "stress": ("stressed", "overwhelmed", "pressure", "burden", "exhausted"),
    "anger": ("angry", "frustrated", "mad", "irritated", "furious"),
    "joy": ("happy", "excited", "great", "wonderful", "amazing", "good"),
    "neutral": ("okay", "fine", "normal", "alright"),
}

DEFAULT_EMOTION = "neutral"
SATURATION_MATCHES = 3


class EmotionClassifier:
    """Keyword-count emotion classifier. Stateless and cheap to share."""

    def __init__(self, keywords: dict[str, tuple[str, ...]] | None = None) -> None:
        self._keywords = keywords or EMOTION_KEYWORDS

    def classify(self, text: str) -> EmotionAnalysis:
        if not text or not text.strip():
            return EmotionAnalysis(primary_emotion=DEFAULT_EMOTION, confidence=0.0)

        lowered = text.lower()
        max_score = 0
        primary = DEFAULT_EMOTION

        for emotion, keywords in self._keywords.items():
            score = sum(1 for keyword in keywords if keyword in lowered)
            if score > max_score:
                max_score = score
                primary = emotion

        return EmotionAnalysis(
            primary_emotion=primary,
            confidence=min(max_score / SATURATION_MATCHES, 1.0),
        )


_default_classifier: EmotionClassifier | None = None


def get_emotion_classifier() -> EmotionClassifier:
    global _default_classifier
    if _default_classifier is None:
        _default_classifier = EmotionClassifier()
    return _default_classifier
