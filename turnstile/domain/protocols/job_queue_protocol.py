"""Job queue protocol (port) for asynchronous delivery."""

from typing import Any, Protocol


class JobQueueProtocol(Protocol):
    """External job queue. The core only enqueues."""

    async def enqueue(
        self, job_name: str, payload: dict[str, Any], *, max_retries: int
    ) -> None:
        """Schedule a job.

        Args:
            job_name: Registered job name.
            payload: JSON-serializable job arguments.
            max_retries: Retries the worker may attempt after a failure.
        """
        ...
