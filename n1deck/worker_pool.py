"""Bounded-concurrency job runner with first-error propagation."""

import asyncio
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from n1deck.logger import get_logger

JobT = TypeVar("JobT")


class JobFailedError(Exception):
    """Raised after the pool drains if any job failed; chained to the first failure."""

    def __init__(self, message: str, job: object):
        super().__init__(message)
        self.job = job


class FirstError(Generic[JobT]):
    """Lock-guarded slot that keeps only the earliest recorded failure."""

    def __init__(self):
        self._lock = asyncio.Lock()
        self.job: Optional[JobT] = None
        self.error: Optional[BaseException] = None

    async def record(self, job: JobT, error: BaseException) -> bool:
        """Store the failure if the slot is still empty. Returns True if stored."""
        async with self._lock:
            if self.error is not None:
                return False
            self.job = job
            self.error = error
            return True

    def __bool__(self) -> bool:
        return self.error is not None


async def run_jobs(
    jobs: list[JobT],
    handler: Callable[[JobT], Awaitable[None]],
    concurrency: int,
    describe: Callable[[JobT], str] = str,
) -> None:
    """
    Run jobs with at most `concurrency` workers sharing one queue.

    A failing job does not stop the others: every worker keeps draining the
    queue. Once all workers have finished, the first failure (in completion
    order) is raised as JobFailedError with the original exception chained.

    Args:
        jobs: Work items, consumed once each
        handler: Coroutine function processing a single job
        concurrency: Maximum number of concurrent workers
        describe: Formats a job for error messages

    Raises:
        JobFailedError: If any job raised
    """
    if not jobs:
        return

    queue: asyncio.Queue = asyncio.Queue()
    for job in jobs:
        queue.put_nowait(job)

    first_error: FirstError[JobT] = FirstError()
    logger = get_logger()

    async def worker() -> None:
        while True:
            try:
                job = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            try:
                await handler(job)
            except Exception as e:
                await first_error.record(job, e)
                logger.debug(f"Recorded failure for {describe(job)}: {e}")
            finally:
                queue.task_done()

    workers = min(concurrency, len(jobs))
    await asyncio.gather(*(worker() for _ in range(max(workers, 1))))

    if first_error:
        error = first_error.error
        raise JobFailedError(
            f"Error for {describe(first_error.job)}: {type(error).__name__} {error}",
            first_error.job,
        ) from error
