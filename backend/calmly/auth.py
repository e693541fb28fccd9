"""
Authentication
==============
Resolves the caller's identity from a Supabase Auth bearer token.

Every client-facing route calls ``get_authenticated_user_id`` before it
touches data. User records themselves live in Supabase Auth; Calmly only
needs the user id to key profiles, conversations and voice analyses.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from calmly.db.supabase import get_supabase_client

logger = logging.getLogger(__name__)


def get_authenticated_user_id(authorization: str) -> str:
    """Verify the JWT and return the Supabase user id.

    Raises HTTPException 401 if the token is invalid or missing.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Missing or invalid authorization header", "code": "auth_required"},
        )

    token = authorization.removeprefix("Bearer ").strip()
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Empty bearer token", "code": "auth_required"},
        )

    db = get_supabase_client()

    try:
        auth_response = db.auth.get_user(token)
    except Exception as exc:
        logger.warning("Auth token verification failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Invalid or expired token", "code": "auth_invalid"},
        ) from exc

    if not auth_response or not auth_response.user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "User not found for token", "code": "auth_invalid"},
        )

    return str(auth_response.user.id)
