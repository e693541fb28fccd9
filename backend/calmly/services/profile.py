"""
Profile Service
===============
Reads and updates the ``profiles`` table: one row per user holding
preferences and mental health tracking data.

Update rules:
    - preferences are replaced wholesale
    - goals, triggers and current mood come from the update; when the
      update omits mental_health_data they are reset to empty
    - mood_history is never touched by a profile update, only appended
      to by record_mood
"""

from __future__ import annotations

import logging
from typing import Optional

from supabase import Client

from calmly.db.supabase import get_supabase_client
from calmly.models.profile import (
    MentalHealthData,
    MentalHealthDataUpdate,
    MoodEntry,
    Preferences,
    Profile,
)
from calmly.services.conversation_store import StorageWriteError, utcnow

logger = logging.getLogger(__name__)

_TABLE = "profiles"


class ProfileNotFoundError(Exception):
    """The user has not created a profile yet."""

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(f"No profile found for user {user_id}")


class ProfileService:
    def __init__(self, db: Client | None = None) -> None:
        self._db = db or get_supabase_client()

    def get_profile(self, user_id: str) -> Optional[Profile]:
        result = (
            self._db.table(_TABLE)
            .select("*")
            .eq("user_id", user_id)
            .maybe_single()
            .execute()
        )
        if result is None or not result.data:
            return None
        return Profile(**result.data)

    def upsert_profile(
        self,
        user_id: str,
        preferences: Preferences,
        mental_health_data: Optional[MentalHealthDataUpdate] = None,
    ) -> Profile:
        """Create the profile on first call, otherwise replace the editable fields."""
        existing = self.get_profile(user_id)
        update = mental_health_data or MentalHealthDataUpdate()

        merged = MentalHealthData(
            current_mood=update.current_mood,
            mood_history=existing.mental_health_data.mood_history if existing else [],
            goals=update.goals,
            triggers=update.triggers,
        )

        row = {
            "user_id": user_id,
            "preferences": preferences.model_dump(mode="json"),
            "mental_health_data": merged.model_dump(mode="json"),
        }

        result = self._db.table(_TABLE).upsert(row, on_conflict="user_id").execute()

        if not result.data:
            logger.error("Failed to upsert profile for user %s", user_id)
            raise StorageWriteError("Failed to save profile")

        if existing is None:
            logger.info("Created profile for user %s", user_id)
        return Profile(**result.data[0])

    def record_mood(self, user_id: str, mood: str, notes: Optional[str] = None) -> MoodEntry:
        """Append a mood entry and make it the current mood.

        Raises ProfileNotFoundError if the user has no profile yet.
        """
        profile = self.get_profile(user_id)
        if profile is None:
            raise ProfileNotFoundError(user_id)

        entry = MoodEntry(mood=mood, timestamp=utcnow(), notes=notes)

        data = profile.mental_health_data
        updated = data.model_copy(
            update={
                "current_mood": mood,
                "mood_history": [*data.mood_history, entry],
            }
        )

        result = (
            self._db.table(_TABLE)
            .update({"mental_health_data": updated.model_dump(mode="json")})
            .eq("id", profile.id)
            .execute()
        )

        if not result.data:
            logger.error("Failed to record mood for user %s", user_id)
            raise StorageWriteError("Failed to save mood entry")

        return entry


def get_profile_service() -> ProfileService:
    return ProfileService()
