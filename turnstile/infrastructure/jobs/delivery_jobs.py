"""Delivery job handlers.

Each DeliveryJob name is bound to a handler that rebuilds the message from
its payload and delivers it through the same dispatcher used for
synchronous delivery.
"""

from typing import Any

from turnstile.application.services.delivery_dispatcher import (
    DeliveryDispatcher,
    DeliveryJob,
    DeliveryMessage,
)
from turnstile.infrastructure.jobs.in_memory_job_queue import InMemoryJobQueue


def register_delivery_jobs(queue: InMemoryJobQueue, dispatcher: DeliveryDispatcher) -> None:
    """Register a handler for every delivery job on ``queue``."""
    for job in DeliveryJob:
        queue.register(job.value, _handler_for(job, dispatcher))


def _handler_for(job: DeliveryJob, dispatcher: DeliveryDispatcher):
    async def handle(payload: dict[str, Any]) -> None:
        await dispatcher.deliver(DeliveryMessage.from_payload(job.value, payload))

    handle.__name__ = f"deliver_{job.name.lower()}"
    return handle
