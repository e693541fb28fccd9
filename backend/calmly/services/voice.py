"""
Voice Analysis Service
======================
Upload URLs for voice clips and (placeholder) analysis of those clips.

Upload flow:
    1. Client asks for a signed upload URL (generate_upload_url)
    2. Client PUTs the audio bytes to Supabase Storage directly
    3. Client calls process_voice_analysis with the returned audio_file_id

Analysis is delegated to a VoiceAnalyzer. The only implementation today
is MockVoiceAnalyzer, which returns a fixed payload and does no signal
processing. A real speech/emotion service should implement the same
``analyze`` signature so callers and the stored shape stay unchanged.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional, Protocol

from supabase import Client

from calmly.config import Settings, get_settings
from calmly.db.supabase import get_supabase_client
from calmly.models.voice import (
    DetectedEmotion,
    SpeechPattern,
    VoiceAnalysis,
    VoiceAnalysisRecord,
    VoiceUploadUrl,
)
from calmly.services.conversation_store import StorageWriteError, utcnow

logger = logging.getLogger(__name__)

_TABLE = "voice_analyses"


class VoiceAnalyzer(Protocol):
    async def analyze(self, audio_file_id: str, language: str) -> VoiceAnalysis: ...


class MockVoiceAnalyzer:
    """Returns the same canned analysis for every clip."""

    async def analyze(self, audio_file_id: str, language: str) -> VoiceAnalysis:
        return VoiceAnalysis(
            transcription="I'm feeling a bit overwhelmed today...",
            language=language,
            emotions=[
                DetectedEmotion(emotion="stress", confidence=0.75),
                DetectedEmotion(emotion="anxiety", confidence=0.60),
            ],
            stress_level=0.7,
            speech_pattern=SpeechPattern(pace="fast", tone="tense", clarity=0.8),
        )


class VoiceService:
    def __init__(
        self,
        db: Client | None = None,
        analyzer: VoiceAnalyzer | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._db = db or get_supabase_client()
        self._analyzer = analyzer or MockVoiceAnalyzer()
        self._settings = settings or get_settings()

    def generate_upload_url(self, user_id: str) -> VoiceUploadUrl:
        """Create a signed upload URL under the user's folder in the voice bucket."""
        path = f"{user_id}/{uuid.uuid4().hex}.webm"
        signed = (
            self._db.storage
            .from_(self._settings.voice_bucket)
            .create_signed_upload_url(path)
        )
        # storage3 has returned both spellings across releases
        upload_url = signed.get("signed_url") or signed.get("signedUrl")
        if not upload_url:
            logger.error("Storage returned no signed upload URL for user %s", user_id)
            raise StorageWriteError("Failed to create upload URL")

        return VoiceUploadUrl(upload_url=upload_url, audio_file_id=signed.get("path") or path)

    async def process_voice_analysis(
        self,
        user_id: str,
        audio_file_id: str,
        language: Optional[str] = None,
    ) -> VoiceAnalysisRecord:
        language = language or self._settings.default_language
        analysis = await self._analyzer.analyze(audio_file_id, language)

        row = {
            "user_id": user_id,
            "audio_file_id": audio_file_id,
            "analysis": analysis.model_dump(mode="json"),
            "timestamp": utcnow().isoformat(),
        }
        result = self._db.table(_TABLE).insert(row).execute()

        if not result.data:
            logger.error("Failed to insert voice analysis for user %s", user_id)
            raise StorageWriteError("Failed to save voice analysis")

        return VoiceAnalysisRecord(**result.data[0])


def get_voice_service() -> VoiceService:
    return VoiceService()
