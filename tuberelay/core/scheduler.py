"""
Single-consumer job queue for poll cycles and scans.

The periodic timer and chat commands both submit jobs here; one worker task
runs them in order, so two cycles never overlap and no locks are needed.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[Any]]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _QueuedJob:
    name: str
    job: Job
    future: asyncio.Future


class CycleRunner:
    """
    Runs submitted jobs one at a time and drives the periodic poll.
    
    Usage:
        runner = CycleRunner(periodic=poller.run_poll_cycle, interval=backoff.current)
        await runner.start()
        report = await runner.submit("testcheck", poller.run_poll_cycle)
    """
    
    def __init__(
        self,
        periodic: Optional[Job] = None,
        interval: Optional[Callable[[datetime], float]] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        if periodic is not None and interval is None:
            raise ValueError("a periodic job needs an interval")
        self._periodic = periodic
        self._interval = interval
        self._clock = clock
        self._queue: "asyncio.Queue[_QueuedJob]" = asyncio.Queue()
        self._running = False
        self._worker_task: Optional[asyncio.Task] = None
        self._timer_task: Optional[asyncio.Task] = None
    
    @property
    def running(self) -> bool:
        return self._running
    
    async def start(self):
        """Start the worker and, when a periodic job is set, the timer."""
        if self._running:
            return
        
        self._running = True
        self._worker_task = asyncio.create_task(self._worker_loop())
        if self._periodic is not None:
            self._timer_task = asyncio.create_task(self._timer_loop())
        logger.info("Cycle runner started")
    
    async def stop(self):
        """Cancel the timer and the worker. Queued jobs that never ran are cancelled too."""
        self._running = False
        for task in (self._timer_task, self._worker_task):
            if task:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._timer_task = None
        self._worker_task = None
        
        while not self._queue.empty():
            queued = self._queue.get_nowait()
            queued.future.cancel()
        logger.info("Cycle runner stopped")
    
    def submit(self, name: str, job: Job) -> asyncio.Future:
        """Enqueue a job; the returned future resolves with its result."""
        future = asyncio.get_running_loop().create_future()
        self._queue.put_nowait(_QueuedJob(name=name, job=job, future=future))
        logger.debug(f"Queued job {name} (pending={self._queue.qsize()})")
        return future
    
    async def _worker_loop(self):
        while True:
            queued = await self._queue.get()
            if queued.future.cancelled():
                continue
            logger.debug(f"Running job {queued.name}")
            try:
                result = await queued.job()
            except asyncio.CancelledError:
                queued.future.cancel()
                raise
            except Exception as e:
                logger.error(f"Job {queued.name} failed: {e}", exc_info=True)
                if not queued.future.done():
                    queued.future.set_exception(e)
            else:
                if not queued.future.done():
                    queued.future.set_result(result)
    
    async def _timer_loop(self):
        """Submit the periodic job immediately, then after each interval."""
        while self._running:
            future = self.submit("periodic", self._periodic)
            try:
                await future
            except asyncio.CancelledError:
                raise
            except Exception:
                # Already logged by the worker; the next tick proceeds normally
                pass
            
            delay = self._interval(self._clock())
            logger.info(f"Next scheduled check in {delay:.0f}s")
            await asyncio.sleep(delay)
