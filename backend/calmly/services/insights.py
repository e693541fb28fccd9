"""
Mood Insights
=============
Summarises a user's mood history for the analytics dashboard:

    recent_entries:  the last 7 mood entries, oldest first
    mood_counts:     how often each mood was logged over the whole history
    daily_entries:   per-day entry count and last logged mood for the
                     trailing window (days without entries are omitted)

Everything is computed from the profile row already in memory; no extra
queries beyond the profile and the conversation count.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Optional

import pandas as pd
from pydantic import BaseModel

from calmly.models.profile import MentalHealthData, MoodEntry

logger = logging.getLogger(__name__)

RECENT_ENTRIES = 7
DEFAULT_WINDOW_DAYS = 7


class DailyMood(BaseModel):
    date: date
    entries: int
    last_mood: str


class MoodInsights(BaseModel):
    current_mood: Optional[str]
    total_entries: int
    conversation_count: int
    recent_entries: list[MoodEntry]
    mood_counts: dict[str, int]
    daily_entries: list[DailyMood]
    window_start: date
    window_end: date


def summarise_mood_history(
    data: Optional[MentalHealthData],
    conversation_count: int = 0,
    days: int = DEFAULT_WINDOW_DAYS,
    now: Optional[datetime] = None,
) -> MoodInsights:
    now = now or datetime.now(timezone.utc)
    window_end = now.date()
    window_start = window_end - timedelta(days=days - 1)  # inclusive window

    history = data.mood_history if data else []

    if not history:
        return MoodInsights(
            current_mood=data.current_mood if data else None,
            total_entries=0,
            conversation_count=conversation_count,
            recent_entries=[],
            mood_counts={},
            daily_entries=[],
            window_start=window_start,
            window_end=window_end,
        )

    df = pd.DataFrame([entry.model_dump() for entry in history])
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
    df["date"] = df["timestamp"].dt.date

    mood_counts = {str(mood): int(n) for mood, n in df["mood"].value_counts().items()}

    window = df[(df["date"] >= window_start) & (df["date"] <= window_end)].sort_values("timestamp")
    daily = window.groupby("date").agg(entries=("mood", "size"), last_mood=("mood", "last"))
    daily_entries = [
        DailyMood(date=day, entries=int(row["entries"]), last_mood=str(row["last_mood"]))
        for day, row in daily.iterrows()
    ]

    return MoodInsights(
        current_mood=data.current_mood,
        total_entries=len(history),
        conversation_count=conversation_count,
        recent_entries=history[-RECENT_ENTRIES:],
        mood_counts=mood_counts,
        daily_entries=daily_entries,
        window_start=window_start,
        window_end=window_end,
    )
