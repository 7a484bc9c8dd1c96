"""PollingController: per-job status polling until terminal or cancelled.

State per job id is `IDLE -> POLLING -> IDLE`. Each poll is one asyncio task
that waits `interval` seconds, fetches the job and merges the result into
the store, and ends once the scheduler reports a terminal status.

Cancellation only suppresses *future* probes:

* a task waiting for its next tick is cancelled immediately;
* a probe already awaiting the scheduler is left to finish, its result is
  still merged into the store, and the loop then exits without scheduling
  another probe.

Fetch failures are transient by definition here: they are logged and the
next tick proceeds as usual (no backoff, no retry ceiling).
"""
from __future__ import annotations

import asyncio
from enum import StrEnum
from typing import Dict, List

from jobwatch.core.exceptions import SchedulerApiError
from jobwatch.core.logging_config import correlation_id_var
from jobwatch.core.managers.job_store import JobStore
from jobwatch.core.managers.scheduler_client import SchedulerClient
from jobwatch.core.models.job import is_optimistic_id
from jobwatch.core.settings import logger

DEFAULT_POLL_INTERVAL = 1.0


class PollState(StrEnum):
    IDLE = "idle"
    POLLING = "polling"


class _PollHandle:
    """Bookkeeping for one running poll loop."""

    __slots__ = ("job_id", "task", "stopped", "in_flight")

    def __init__(self, job_id: str):
        self.job_id = job_id
        self.task: asyncio.Task | None = None
        self.stopped = False
        self.in_flight = False


class PollingController:
    def __init__(
        self,
        client: SchedulerClient,
        store: JobStore,
        interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self._client = client
        self._store = store
        self.interval = interval
        self._handles: Dict[str, _PollHandle] = {}
        # Tasks still running after stop() (in-flight probes); awaited by shutdown()
        self._draining: set[asyncio.Task] = set()
        self._shutdown = False

    # ---------------- State -----------------
    def state(self, job_id: str) -> PollState:
        return PollState.POLLING if job_id in self._handles else PollState.IDLE

    def is_polling(self, job_id: str) -> bool:
        return self.state(job_id) is PollState.POLLING

    def active(self) -> List[str]:
        return list(self._handles)

    # ---------------- Control -----------------
    def start(self, job_id: str) -> bool:
        """Begin polling job_id; returns False when polling is not applicable."""
        if self._shutdown:
            return False
        if is_optimistic_id(job_id):
            logger.debug(f"[poll] refusing optimistic job_id={job_id}")
            return False
        if job_id in self._handles:
            return False
        job = self._store.get(job_id)
        if job is None:
            logger.debug(f"[poll] refusing unknown job_id={job_id}")
            return False
        if job.is_in_terminal_state():
            logger.debug(f"[poll] refusing terminal job_id={job_id} status={job.status}")
            return False

        handle = _PollHandle(job_id)
        handle.task = asyncio.create_task(self._poll_loop(handle), name=f"poll:{job_id}")
        handle.task.add_done_callback(lambda t: self._on_done(handle, t))
        self._handles[job_id] = handle
        logger.debug(f"[poll] scheduled job_id={job_id} interval={self.interval}s")
        return True

    def stop(self, job_id: str) -> bool:
        """Stop polling job_id immediately; returns False if it was not polling."""
        handle = self._handles.pop(job_id, None)
        if handle is None:
            return False
        handle.stopped = True
        if handle.task is not None and not handle.task.done():
            if handle.in_flight:
                # Let the in-flight probe land; the loop exits right after it
                self._draining.add(handle.task)
            else:
                handle.task.cancel()
        logger.debug(f"[poll] stopped job_id={job_id} in_flight={handle.in_flight}")
        return True

    async def shutdown(self) -> None:
        """Stop every poll and wait for all poll tasks to finish."""
        self._shutdown = True
        tasks = [h.task for h in self._handles.values() if h.task is not None]
        for job_id in list(self._handles):
            self.stop(job_id)
        tasks.extend(self._draining)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # ---------------- Loop -----------------
    async def _poll_loop(self, handle: _PollHandle) -> None:
        correlation_id_var.set(handle.job_id)
        while not handle.stopped:
            await asyncio.sleep(self.interval)
            if handle.stopped:
                return
            if await self._probe(handle):
                logger.debug(f"[poll] terminal state reached job_id={handle.job_id}")
                return

    async def _probe(self, handle: _PollHandle) -> bool:
        """Fetch and merge once. Returns True when the job is terminal."""
        handle.in_flight = True
        try:
            job = await self._client.get_job(handle.job_id)
        except SchedulerApiError as exc:
            logger.debug(f"[poll] fetch error job_id={handle.job_id} status={exc.status} err={exc.message}")
            return False
        finally:
            handle.in_flight = False
        self._store.merge(job)
        return job.is_in_terminal_state()

    def _on_done(self, handle: _PollHandle, task: asyncio.Task) -> None:
        self._draining.discard(task)
        # Only clear the registration if it still belongs to this task
        if self._handles.get(handle.job_id) is handle:
            del self._handles[handle.job_id]
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"[poll] loop crashed job_id={handle.job_id} err={task.exception()!r}")
