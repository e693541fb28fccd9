"""
Calmly Configuration
====================
All environment variables in one place. Pydantic Settings validates
types at startup so a bad value fails on boot instead of on first request.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Loaded from environment variables or a .env file."""

    # --- Supabase ---
    supabase_url: str = "http://localhost:54321"
    supabase_service_key: str = ""  # service_role key for backend operations
    voice_bucket: str = "voice-uploads"

    # --- Completion service (OpenAI-compatible chat completions) ---
    completion_base_url: str = "https://api.openai.com/v1"
    completion_api_key: str = ""
    completion_model: str = "gpt-4o-mini"
    completion_temperature: float = 0.7
    completion_max_tokens: int = 500
    completion_timeout_seconds: float = 30.0

    # Number of most recent conversation messages sent with each prompt
    context_window_messages: int = 5

    # --- Background replies ---
    reply_workers: int = 1

    # --- App settings ---
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    default_language: str = "en"
    default_conversation_limit: int = 10

    # --- Feature flags ---
    # Kill switch: if False, skip the completion service and reply with the
    # fallback message. Useful for local dev without an API key.
    enable_ai_responses: bool = True

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
