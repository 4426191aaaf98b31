"""Unit tests for InMemoryJobQueue and the delivery job handlers.

Tests cover:
- Enqueue/drain flow and unregistered job names
- Retries and dead letters
- Delivery jobs rebuilding messages from their payloads
"""

from unittest.mock import MagicMock

import pytest

from turnstile.application.services.delivery_dispatcher import (
    DeliveryDispatcher,
    DeliveryJob,
    DeliveryMessage,
)
from turnstile.infrastructure.jobs import InMemoryJobQueue, register_delivery_jobs


@pytest.mark.unit
class TestInMemoryJobQueue:
    """Queue mechanics."""

    @pytest.mark.asyncio
    async def test_drain_runs_jobs_in_order(self):
        # Arrange
        queue = InMemoryJobQueue(logger=MagicMock())
        seen: list[int] = []

        async def handler(payload: dict) -> None:
            seen.append(payload["n"])

        queue.register("count", handler)
        for n in range(3):
            await queue.enqueue("count", {"n": n}, max_retries=0)

        # Act
        completed = await queue.drain()

        # Assert
        assert completed == 3
        assert seen == [0, 1, 2]
        assert queue.pending_count == 0

    @pytest.mark.asyncio
    async def test_unregistered_job_rejected(self):
        queue = InMemoryJobQueue(logger=MagicMock())

        with pytest.raises(KeyError):
            await queue.enqueue("unknown", {}, max_retries=0)

    @pytest.mark.asyncio
    async def test_payload_is_copied(self):
        queue = InMemoryJobQueue(logger=MagicMock())

        async def handler(payload: dict) -> None:
            pass

        queue.register("job", handler)
        payload = {"to": "a@x.com"}
        await queue.enqueue("job", payload, max_retries=0)
        payload["to"] = "changed@x.com"

        assert queue.pending()[0].payload == {"to": "a@x.com"}

    @pytest.mark.asyncio
    async def test_failing_job_retried_then_succeeds(self):
        logger = MagicMock()
        queue = InMemoryJobQueue(logger=logger)
        calls = 0

        async def flaky(payload: dict) -> None:
            nonlocal calls
            calls += 1
            if calls < 3:
                raise ConnectionError("smtp down")

        queue.register("flaky", flaky)
        await queue.enqueue("flaky", {}, max_retries=3)

        completed = await queue.drain()

        assert completed == 1
        assert calls == 3
        assert queue.dead_letters == []
        assert logger.warning.call_count == 2

    @pytest.mark.asyncio
    async def test_exhausted_job_goes_to_dead_letters(self):
        """Test a job failing max_retries + 1 times is dead-lettered."""
        # Arrange
        logger = MagicMock()
        queue = InMemoryJobQueue(logger=logger)

        async def broken(payload: dict) -> None:
            raise ConnectionError("smtp down")

        queue.register("broken", broken)
        await queue.enqueue("broken", {}, max_retries=2)

        # Act
        completed = await queue.drain()

        # Assert
        assert completed == 0
        assert len(queue.dead_letters) == 1
        assert queue.dead_letters[0].attempts == 3
        logger.error.assert_called_once()
        assert logger.error.call_args.args[0] == "job_failed_permanently"


@pytest.mark.unit
class TestDeliveryJobs:
    """Delivery handlers registered on the queue."""

    @pytest.mark.asyncio
    async def test_every_delivery_job_registered(self, user_store, email_outbox):
        queue = InMemoryJobQueue(logger=MagicMock())
        dispatcher = DeliveryDispatcher(
            user_store=user_store, logger=MagicMock(), email_delivery=email_outbox
        )

        register_delivery_jobs(queue, dispatcher)

        for job in DeliveryJob:
            await queue.enqueue(job.value, {"to": "x"}, max_retries=0)
        assert queue.pending_count == len(DeliveryJob)

    @pytest.mark.asyncio
    async def test_queued_magic_link_delivered_on_drain(self, user_store, email_outbox):
        # Arrange
        queue = InMemoryJobQueue(logger=MagicMock())
        dispatcher = DeliveryDispatcher(
            user_store=user_store,
            logger=MagicMock(),
            email_delivery=email_outbox,
            job_queue=queue,
        )
        register_delivery_jobs(queue, dispatcher)
        message = DeliveryMessage(
            job=DeliveryJob.EMAIL_MAGIC_LINK,
            to="a@x.com",
            url="https://app.example.com/auth/magic?token=t",
        )

        # Act
        await dispatcher.dispatch(message, use_queue=True)
        assert email_outbox.sent == []
        await queue.drain()

        # Assert
        sent = email_outbox.last("magic_link")
        assert sent.to == "a@x.com"
        assert sent.url == message.url
        assert sent.user_id is None
