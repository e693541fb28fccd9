"""
Profile & Mood Schemas
======================
Pydantic models for the user profile and mood tracking API.

A profile holds two things: display preferences and mental health
tracking data. The mood history inside ``mental_health_data`` is an
append-only log: clients can replace goals and triggers, but mood
entries are only ever added through POST /api/v1/profile/mood.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Stored shapes
# ---------------------------------------------------------------------------

class Preferences(BaseModel):
    """User-facing settings. Replaced wholesale on every profile update."""

    language: str = Field(default="en", max_length=16)
    theme: Literal["light", "dark", "system"] = "system"
    voice_enabled: bool = False
    notifications: bool = True


class MoodEntry(BaseModel):
    """One self-reported mood, as logged from the mood tracker."""

    mood: str
    timestamp: datetime
    notes: Optional[str] = None


class MentalHealthData(BaseModel):
    current_mood: Optional[str] = None
    mood_history: list[MoodEntry] = Field(default_factory=list)
    goals: list[str] = Field(default_factory=list)
    triggers: list[str] = Field(default_factory=list)


class Profile(BaseModel):
    """One row of the ``profiles`` table. Exactly one per user."""

    id: str
    user_id: str
    preferences: Preferences
    mental_health_data: MentalHealthData


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class MentalHealthDataUpdate(BaseModel):
    """Client-editable part of mental_health_data. Mood history is excluded."""

    current_mood: Optional[str] = None
    goals: list[str] = Field(default_factory=list)
    triggers: list[str] = Field(default_factory=list)


class ProfileUpdateRequest(BaseModel):
    preferences: Preferences
    mental_health_data: Optional[MentalHealthDataUpdate] = None


class MoodRecordRequest(BaseModel):
    mood: str = Field(..., min_length=1, max_length=50)
    notes: Optional[str] = Field(default=None, max_length=1000)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class ProfileResponse(BaseModel):
    """Envelope for GET /api/v1/profile. ``profile`` is null for new users."""

    profile: Optional[Profile] = None
