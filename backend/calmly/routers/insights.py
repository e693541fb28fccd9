"""
Insights Router
===============
GET /api/v1/insights/mood  Mood analytics for the dashboard.

Returns everything the analytics tab renders in one round-trip:
current mood, total entries, conversation count, the last 7 mood
entries, mood frequencies, and per-day activity for the trailing
window. Users without a profile get an empty summary, not a 404.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Header, Query

from calmly.auth import get_authenticated_user_id
from calmly.db.supabase import get_supabase_client
from calmly.services.conversation_store import ConversationStore
from calmly.services.insights import MoodInsights, summarise_mood_history
from calmly.services.profile import ProfileService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/insights", tags=["insights"])


@router.get(
    "/mood",
    response_model=MoodInsights,
    summary="Get mood analytics",
    description=(
        "Mood frequencies, recent entries and daily activity for the last "
        "`days` days. All sections may be empty for new users."
    ),
    responses={
        200: {"description": "Insights returned"},
        401: {"description": "Authentication required"},
    },
)
async def get_mood_insights(
    days: int = Query(default=7, ge=1, le=90),
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> MoodInsights:
    user_id = get_authenticated_user_id(authorization)

    db = get_supabase_client()
    profile = ProfileService(db).get_profile(user_id)
    conversation_count = ConversationStore(db).count_for_user(user_id)

    return summarise_mood_history(
        profile.mental_health_data if profile else None,
        conversation_count=conversation_count,
        days=days,
    )
