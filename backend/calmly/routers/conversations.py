"""
Conversations Router
====================
GET  /api/v1/conversations                   List the caller's conversations
GET  /api/v1/conversations/{id}              Read one conversation
POST /api/v1/conversations                   Start a conversation
POST /api/v1/conversations/{id}/messages     Add a user message

Posting a message returns as soon as the user's message is saved. The
AI reply is generated by a background worker and appended to the same
conversation; clients poll GET /conversations/{id} to pick it up. Chat
never fails because of the completion service: on any upstream error
a fallback reply is appended instead.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Header, HTTPException, Query, status

from calmly.auth import get_authenticated_user_id
from calmly.models.conversation import (
    AddMessageRequest,
    Conversation,
    Message,
    StartConversationRequest,
)
from calmly.services.conversation import ConversationForbiddenError, get_conversation_service
from calmly.services.conversation_store import ConversationNotFoundError, StorageWriteError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/conversations", tags=["conversations"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _to_http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, ConversationNotFoundError):
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": "Conversation not found", "code": "conversation_not_found"},
        )
    if isinstance(exc, ConversationForbiddenError):
        return HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"message": "You do not have access to this conversation", "code": "forbidden"},
        )
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"message": str(exc), "code": "db_error"},
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=list[Conversation],
    summary="List the caller's conversations, newest first",
    responses={401: {"description": "Authentication required"}},
)
async def get_conversations(
    limit: int = Query(default=10, ge=1, le=100),
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> list[Conversation]:
    user_id = get_authenticated_user_id(authorization)
    return get_conversation_service().list_conversations(user_id, limit)


@router.get(
    "/{conversation_id}",
    response_model=Conversation,
    summary="Read one conversation",
    responses={
        401: {"description": "Authentication required"},
        403: {"description": "Conversation belongs to another user"},
        404: {"description": "Conversation not found"},
    },
)
async def get_conversation(
    conversation_id: str,
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> Conversation:
    user_id = get_authenticated_user_id(authorization)
    try:
        return get_conversation_service().get_conversation(user_id, conversation_id)
    except (ConversationNotFoundError, ConversationForbiddenError) as exc:
        raise _to_http_error(exc) from exc


@router.post(
    "",
    response_model=Conversation,
    status_code=status.HTTP_201_CREATED,
    summary="Start a conversation",
    description=(
        "Creates a conversation holding the initial user message and queues "
        "an AI reply. The reply is appended asynchronously."
    ),
    responses={
        201: {"description": "Conversation created"},
        401: {"description": "Authentication required"},
        422: {"description": "Validation error"},
    },
)
async def start_conversation(
    body: StartConversationRequest,
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> Conversation:
    user_id = get_authenticated_user_id(authorization)
    try:
        return get_conversation_service().start_conversation(
            user_id, body.initial_message, body.language
        )
    except StorageWriteError as exc:
        raise _to_http_error(exc) from exc


@router.post(
    "/{conversation_id}/messages",
    response_model=Message,
    status_code=status.HTTP_201_CREATED,
    summary="Add a message to a conversation",
    responses={
        201: {"description": "Message appended, AI reply queued"},
        401: {"description": "Authentication required"},
        403: {"description": "Conversation belongs to another user"},
        404: {"description": "Conversation not found"},
    },
)
async def add_message(
    conversation_id: str,
    body: AddMessageRequest,
    authorization: str = Header(..., description="Bearer token from Supabase Auth"),
) -> Message:
    user_id = get_authenticated_user_id(authorization)
    try:
        return get_conversation_service().add_message(
            user_id,
            conversation_id,
            body.content,
            voice_data=body.voice_data,
            language=body.language,
        )
    except (ConversationNotFoundError, ConversationForbiddenError, StorageWriteError) as exc:
        raise _to_http_error(exc) from exc
