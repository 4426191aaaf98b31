"""Background job adapters."""

from turnstile.infrastructure.jobs.delivery_jobs import register_delivery_jobs
from turnstile.infrastructure.jobs.in_memory_job_queue import InMemoryJobQueue, QueuedJob

__all__ = ["InMemoryJobQueue", "QueuedJob", "register_delivery_jobs"]
