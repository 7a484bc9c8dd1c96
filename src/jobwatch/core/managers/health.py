"""HealthMonitor: periodic liveness probe with a tri-state signal.

`health` is None until the first probe completes, then True or False. A
non-2xx answer and a dropped connection both read as False; the telemetry
log is where the two can be told apart.
"""
from __future__ import annotations

import asyncio
from typing import Optional

from jobwatch.core.interfaces.observers import ChangeListener, Unsubscribe
from jobwatch.core.managers.observers import ChangeNotifier
from jobwatch.core.managers.scheduler_client import SchedulerClient
from jobwatch.core.settings import logger

DEFAULT_HEALTH_INTERVAL = 5.0


class HealthMonitor:
    def __init__(self, client: SchedulerClient, interval: float = DEFAULT_HEALTH_INTERVAL) -> None:
        self._client = client
        self.interval = interval
        self._health: Optional[bool] = None
        self._task: asyncio.Task | None = None
        self._notifier = ChangeNotifier("health")

    @property
    def health(self) -> Optional[bool]:
        return self._health

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def check(self) -> bool:
        """Probe once and publish the result."""
        healthy = await self._client.check_health()
        if healthy != self._health:
            logger.info(f"[health] scheduler health changed {self._health} -> {healthy}")
            self._health = healthy
            self._notifier.notify()
        return healthy

    def start(self) -> None:
        """Probe now and then every `interval` seconds until stop()."""
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name="health-monitor")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

    async def _loop(self) -> None:
        while True:
            await self.check()
            await asyncio.sleep(self.interval)

    def subscribe(self, listener: ChangeListener) -> Unsubscribe:
        return self._notifier.subscribe(listener)

    def clear_listeners(self) -> None:
        self._notifier.clear()
