"""In-process work queue feeding lifecycle transitions to a worker pool."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional

from ...domain.errors import NotFoundError
from ...domain.models.transition import BackoffPolicy, TransitionJob
from ...domain.ports.scheduler import TransitionScheduler

logger = logging.getLogger(__name__)

JobHandler = Callable[[TransitionJob], Awaitable[Any]]


class TransitionQueue(TransitionScheduler):
    """asyncio queue consumed by a fixed pool of worker tasks.

    Delivery is at-least-once: a job whose handler raises is re-queued
    until ``retry.max_attempts`` is reached. Handlers must therefore be
    idempotent. Jobs for unknown claims are dropped without retry.
    """

    def __init__(
        self,
        handler: JobHandler,
        workers: int = 2,
        retry: Optional[BackoffPolicy] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """Initialize the queue.

        Args:
            handler: Coroutine executing one job
            workers: Number of worker tasks
            retry: Redelivery policy for failed jobs
            sleep: Coroutine used to wait before redelivery
        """
        self._handler = handler
        self._worker_count = workers
        self._retry = retry or BackoffPolicy(max_attempts=3, delays=[1.0, 5.0])
        self._sleep = sleep
        self._queue: Optional[asyncio.Queue] = None
        self._workers: List[asyncio.Task] = []

    async def start(self) -> None:
        """Create the queue and spawn the workers."""
        if self._queue is not None:
            return
        self._queue = asyncio.Queue()
        self._workers = [
            asyncio.create_task(self._worker_loop(index), name=f"transition-worker-{index}")
            for index in range(self._worker_count)
        ]
        logger.info(f"🚦 Transition queue started with {self._worker_count} workers")
        if not self._worker_count:
            logger.warning("⚠️ Transition queue has no workers, scheduled jobs will not run")

    async def schedule(self, job: TransitionJob) -> None:
        """Enqueue a job without waiting for it to run."""
        if self._queue is None:
            raise RuntimeError("Transition queue is not running")
        self._queue.put_nowait(job)
        logger.debug(f"📬 Queued {job.stage.value} for claim {job.claim_id} (attempt {job.attempt})")

    async def drain(self) -> None:
        """Wait until every queued job, including redeliveries, is done.

        Returns immediately when no workers are running.
        """
        if self._queue is not None and self._workers:
            await self._queue.join()

    async def stop(self) -> None:
        """Cancel the workers and drop pending jobs."""
        for worker in self._workers:
            worker.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        if self._queue is not None and self._queue.qsize():
            logger.warning(f"⚠️ Dropping {self._queue.qsize()} pending transition jobs")
        self._queue = None
        logger.info("🛑 Transition queue stopped")

    async def _worker_loop(self, index: int) -> None:
        while True:
            job = await self._queue.get()
            try:
                await self._handler(job)
            except NotFoundError as e:
                logger.warning(f"⚠️ Worker {index} dropped {job.stage.value} job: {e}")
            except Exception as e:
                await self._redeliver(job, e)
            finally:
                self._queue.task_done()

    async def _redeliver(self, job: TransitionJob, error: Exception) -> None:
        if job.attempt >= self._retry.max_attempts:
            logger.error(
                f"❌ Giving up on {job.stage.value} for claim {job.claim_id} after {job.attempt} attempts: {error}",
                exc_info=error,
            )
            return

        delay = self._retry.delay_for(job.attempt)
        logger.warning(
            f"🔁 {job.stage.value} for claim {job.claim_id} failed ({error}), retrying in {delay:g}s"
        )
        await self._sleep(delay)
        # Re-queue before task_done so drain() keeps waiting
        self._queue.put_nowait(job.next_attempt())

    @property
    def is_running(self) -> bool:
        """Check whether the queue accepts jobs."""
        return self._queue is not None

    @property
    def pending(self) -> int:
        """Get the number of jobs waiting for a worker."""
        return self._queue.qsize() if self._queue is not None else 0

    @property
    def worker_count(self) -> int:
        """Get the configured number of workers."""
        return self._worker_count
