"""
Profile Router
==============
GET  /api/v1/profile        Fetch the caller's profile (null if none yet)
PUT  /api/v1/profile        Create or update preferences, goals, triggers
POST /api/v1/profile/mood   Log a mood entry

A profile must exist before moods can be recorded. The mood tracker in
the app creates one with default preferences the first time it opens.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Header, HTTPException, status

from calmly.auth import get_authenticated_user_id
from calmly.models.profile import (
    MoodEntry,
    MoodRecordRequest,
    Profile,
    ProfileResponse,
    ProfileUpdateRequest,
)
from calmly.services.conversation_store import StorageWriteError
from calmly.services.profile import ProfileNotFoundError, get_profile_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/profile", tags=["profile"])


@router.get(
    "",
    response_model=ProfileResponse,
    summary="Get the caller's profile",
    responses={
        200: {"description": "Profile returned (null if not created yet)"},
        401: {"description": "Authentication required"},
    },
)
async def get_user_profile(
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> ProfileResponse:
    user_id = get_authenticated_user_id(authorization)
    profile = get_profile_service().get_profile(user_id)
    return ProfileResponse(profile=profile)


@router.put(
    "",
    response_model=Profile,
    summary="Create or update the caller's profile",
    description=(
        "Replaces preferences, goals, triggers and current mood. "
        "Mood history is preserved and can only grow via POST /mood."
    ),
    responses={
        200: {"description": "Profile saved"},
        401: {"description": "Authentication required"},
        422: {"description": "Validation error"},
    },
)
async def update_user_profile(
    body: ProfileUpdateRequest,
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> Profile:
    user_id = get_authenticated_user_id(authorization)

    try:
        return get_profile_service().upsert_profile(
            user_id, body.preferences, body.mental_health_data
        )
    except StorageWriteError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": str(exc), "code": "db_error"},
        ) from exc


@router.post(
    "/mood",
    response_model=MoodEntry,
    status_code=status.HTTP_201_CREATED,
    summary="Record a mood entry",
    responses={
        201: {"description": "Mood entry appended"},
        401: {"description": "Authentication required"},
        404: {"description": "Profile not created yet"},
    },
)
async def record_mood(
    body: MoodRecordRequest,
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> MoodEntry:
    user_id = get_authenticated_user_id(authorization)

    try:
        entry = get_profile_service().record_mood(user_id, body.mood, body.notes)
    except ProfileNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "message": "User profile not found. Save your profile before tracking moods.",
                "code": "profile_not_found",
            },
        ) from exc
    except StorageWriteError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": str(exc), "code": "db_error"},
        ) from exc

    logger.info("Recorded mood '%s' for user %s", entry.mood, user_id)
    return entry
