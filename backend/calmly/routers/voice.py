"""
Voice Router
============
POST /api/v1/voice/upload-url  Signed URL for uploading a voice clip
POST /api/v1/voice/analysis    Analyse an uploaded clip and store the result

The analysis is currently a fixed mock payload. The request and response
shapes are stable so a real analyzer can replace it without client changes.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Header, HTTPException, status

from calmly.auth import get_authenticated_user_id
from calmly.models.voice import VoiceAnalysisRecord, VoiceAnalysisRequest, VoiceUploadUrl
from calmly.services.conversation_store import StorageWriteError
from calmly.services.voice import get_voice_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/voice", tags=["voice"])


@router.post(
    "/upload-url",
    response_model=VoiceUploadUrl,
    summary="Create a signed upload URL for a voice clip",
    responses={401: {"description": "Authentication required"}},
)
async def generate_voice_upload_url(
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> VoiceUploadUrl:
    user_id = get_authenticated_user_id(authorization)
    try:
        return get_voice_service().generate_upload_url(user_id)
    except StorageWriteError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": str(exc), "code": "storage_error"},
        ) from exc


@router.post(
    "/analysis",
    response_model=VoiceAnalysisRecord,
    status_code=status.HTTP_201_CREATED,
    summary="Analyse an uploaded voice clip",
    responses={
        201: {"description": "Analysis stored"},
        401: {"description": "Authentication required"},
        422: {"description": "Validation error"},
    },
)
async def process_voice_analysis(
    body: VoiceAnalysisRequest,
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> VoiceAnalysisRecord:
    user_id = get_authenticated_user_id(authorization)
    try:
        record = await get_voice_service().process_voice_analysis(
            user_id, body.audio_file_id, body.language
        )
    except StorageWriteError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": str(exc), "code": "db_error"},
        ) from exc

    logger.info("Stored voice analysis %s for user %s", record.id, user_id)
    return record
