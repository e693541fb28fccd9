"""
Reply Queue
===========
Decouples chat requests from completion-service latency.

Request handlers commit the user's message, then ``enqueue`` a ReplyJob
and return immediately. Worker tasks started by the app lifespan pull
jobs and run the ResponseOrchestrator, which appends the reply (or the
fallback) to the conversation.

There is no cancellation or timeout beyond the completion client's own
HTTP timeout. Jobs still queued at shutdown are drained before workers
are cancelled.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from calmly.config import get_settings
from calmly.services.completion import CompletionClient
from calmly.services.orchestrator import ResponseOrchestrator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReplyJob:
    conversation_id: str
    user_message: str
    language: str


class ReplyQueue:
    """In-process job queue feeding the ResponseOrchestrator."""

    def __init__(self, orchestrator: ResponseOrchestrator, workers: int = 1) -> None:
        self._orchestrator = orchestrator
        self._worker_count = max(workers, 1)
        self._queue: asyncio.Queue[ReplyJob] = asyncio.Queue()
        self._workers: list[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return bool(self._workers)

    def enqueue(self, job: ReplyJob) -> None:
        """Schedule a reply. Never blocks the caller."""
        self._queue.put_nowait(job)
        logger.debug("Queued reply for conversation %s", job.conversation_id)

    async def start(self) -> None:
        if self._workers:
            return
        self._workers = [
            asyncio.create_task(self._run(), name=f"reply-worker-{i}")
            for i in range(self._worker_count)
        ]
        logger.info("Started %d reply worker(s)", self._worker_count)

    async def join(self) -> None:
        """Wait until every queued job has been processed."""
        await self._queue.join()

    async def stop(self) -> None:
        if not self._workers:
            return
        await self._queue.join()
        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        logger.info("Stopped reply workers")

    async def _run(self) -> None:
        while True:
            job = await self._queue.get()
            try:
                await self._orchestrator.generate_reply(
                    job.conversation_id, job.user_message, job.language
                )
            except Exception:
                # A failed job must not take the worker down with it.
                logger.exception("Reply job failed for conversation %s", job.conversation_id)
            finally:
                self._queue.task_done()


# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_default_queue: ReplyQueue | None = None


def get_reply_queue() -> ReplyQueue:
    global _default_queue
    if _default_queue is None:
        settings = get_settings()
        orchestrator = ResponseOrchestrator(
            completion_client=CompletionClient(settings),
            settings=settings,
        )
        _default_queue = ReplyQueue(orchestrator, workers=settings.reply_workers)
    return _default_queue
