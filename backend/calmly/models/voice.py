"""
Voice Analysis Schemas
======================
Pydantic models for voice uploads and their analysis results.

The analysis shape is the contract a real speech/emotion service must
fill when it replaces the mock analyzer.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class DetectedEmotion(BaseModel):
    emotion: str
    confidence: float = Field(..., ge=0.0, le=1.0)


class SpeechPattern(BaseModel):
    pace: str
    tone: str
    clarity: float = Field(..., ge=0.0, le=1.0)


class VoiceAnalysis(BaseModel):
    transcription: str
    language: str
    emotions: list[DetectedEmotion]
    stress_level: float = Field(..., ge=0.0, le=1.0)
    speech_pattern: SpeechPattern


class VoiceAnalysisRecord(BaseModel):
    """One row of the ``voice_analyses`` table."""

    id: str
    user_id: str
    audio_file_id: str
    analysis: VoiceAnalysis
    timestamp: datetime


# ---------------------------------------------------------------------------
# Requests / responses
# ---------------------------------------------------------------------------

class VoiceUploadUrl(BaseModel):
    upload_url: str = Field(..., description="Signed URL the client uploads audio bytes to.")
    audio_file_id: str = Field(..., description="Storage path to pass back for analysis.")


class VoiceAnalysisRequest(BaseModel):
    audio_file_id: str = Field(..., min_length=1)
    language: Optional[str] = Field(default=None, max_length=16)
