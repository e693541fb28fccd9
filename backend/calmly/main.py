"""
Calmly API
==========
FastAPI application entry point. Mount routers here.

The lifespan starts the reply workers that turn queued chat messages
into AI replies, and drains them on shutdown.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from calmly.config import get_settings
from calmly.routers import conversations, insights, profile, voice
from calmly.services.reply_queue import get_reply_queue

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    queue = get_reply_queue()
    await queue.start()
    try:
        yield
    finally:
        await queue.stop()


app = FastAPI(
    title="Calmly API",
    description="Mental wellness chat, mood tracking and voice check-ins: API backend",
    version="0.1.0",
    docs_url="/api/docs" if settings.environment != "production" else None,
    redoc_url="/api/redoc" if settings.environment != "production" else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(profile.router)
app.include_router(conversations.router)
app.include_router(voice.router)
app.include_router(insights.router)


@app.get("/api/v1/health")
async def health_check() -> dict:
    return {"status": "ok", "service": "calmly-api"}
