"""
Supabase Client
===============
Thin wrapper that provides a configured Supabase client for
dependency injection into routes and services.

Supabase is the whole persistence story for Calmly: Postgres tables
(profiles, conversations, voice_analyses), Auth for bearer token
verification, and Storage for uploaded voice clips.

Uses the service_role key because the backend writes rows on behalf of
authenticated users; RLS still protects direct client access.
"""

from functools import lru_cache

from supabase import Client, create_client

from calmly.config import get_settings


@lru_cache
def get_supabase_client() -> Client:
    settings = get_settings()
    return create_client(settings.supabase_url, settings.supabase_service_key)
