"""In-memory job queue.

Implements JobQueueProtocol for development and tests. Jobs wait in a FIFO
until ``drain()`` runs them; a failing job is retried up to its
``max_retries`` and then moved to ``dead_letters``.

Architecture:
- Handlers registered by job name (async callables taking the payload)
- Fail-open worker: a failing job never stops the drain loop
"""

from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from turnstile.domain.protocols.logger_protocol import LoggerProtocol

JobHandler = Callable[[dict[str, Any]], Awaitable[None]]


@dataclass(slots=True, kw_only=True)
class QueuedJob:
    """A job waiting in the queue.

    Attributes:
        name: Registered job name.
        payload: Job arguments.
        max_retries: Retries allowed after the first failure.
        attempts: Runs so far.
    """

    name: str
    payload: dict[str, Any]
    max_retries: int
    attempts: int = 0


class InMemoryJobQueue:
    """Process-local job queue with retries."""

    def __init__(self, logger: LoggerProtocol) -> None:
        self._logger = logger
        self._handlers: dict[str, JobHandler] = {}
        self._pending: deque[QueuedJob] = deque()
        self.dead_letters: list[QueuedJob] = []

    def register(self, job_name: str, handler: JobHandler) -> None:
        """Register the handler executing ``job_name`` jobs."""
        self._handlers[job_name] = handler

    async def enqueue(
        self, job_name: str, payload: dict[str, Any], *, max_retries: int
    ) -> None:
        """Append a job.

        Raises:
            KeyError: If no handler is registered for ``job_name``.
        """
        if job_name not in self._handlers:
            raise KeyError(f"No handler registered for job '{job_name}'")
        self._pending.append(
            QueuedJob(name=job_name, payload=dict(payload), max_retries=max_retries)
        )

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def pending(self) -> list[QueuedJob]:
        """Snapshot of queued jobs (oldest first)."""
        return list(self._pending)

    async def drain(self) -> int:
        """Run queued jobs until the queue is empty.

        Returns:
            Number of jobs that completed successfully.
        """
        completed = 0
        while self._pending:
            job = self._pending.popleft()
            job.attempts += 1
            try:
                await self._handlers[job.name](job.payload)
            except Exception as e:
                if job.attempts <= job.max_retries:
                    self._logger.warning(
                        "job_failed_retrying",
                        job=job.name,
                        attempt=job.attempts,
                        error_type=type(e).__name__,
                    )
                    self._pending.append(job)
                else:
                    self._logger.error(
                        "job_failed_permanently",
                        error=e,
                        job=job.name,
                        attempts=job.attempts,
                    )
                    self.dead_letters.append(job)
                continue
            completed += 1
        return completed
