"""Protocol for handing lifecycle transitions to a worker."""

from typing import Protocol

from ..models.transition import TransitionJob


class TransitionScheduler(Protocol):
    """Protocol for scheduling lifecycle transitions without waiting on them."""

    async def schedule(self, job: TransitionJob) -> None:
        """Place a job for asynchronous execution.

        Raises:
            RuntimeError: If the scheduler is not accepting jobs
        """
        ...
