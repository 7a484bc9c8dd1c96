"""JobWatchEngine: the explicitly owned service object.

All shared state (job store, telemetry log, listener registries, poll tasks)
hangs off one engine instance created at a defined point (`create_engine`)
and torn down through `aclose()`. Nothing is kept in module globals.
"""
from __future__ import annotations

from typing import Optional

from jobwatch.adapters.aiohttp_client_adapter import AioHttpClientAdapter
from jobwatch.adapters.key_value_store_file import FileKeyValueStore
from jobwatch.core.config import EngineConfig
from jobwatch.core.interfaces.http_client import HttpClientPort
from jobwatch.core.interfaces.key_value_store import KeyValueStorePort
from jobwatch.core.managers.health import HealthMonitor
from jobwatch.core.managers.job_manager import JobManager
from jobwatch.core.managers.job_snapshot import JobSnapshotStore
from jobwatch.core.managers.job_store import JobStore
from jobwatch.core.managers.polling import PollingController
from jobwatch.core.managers.scheduler_client import SchedulerClient
from jobwatch.core.managers.telemetry import TelemetryRecorder
from jobwatch.core.settings import app_settings, logger


class JobWatchEngine:
    def __init__(
        self,
        config: EngineConfig,
        http_client: HttpClientPort,
        storage: KeyValueStorePort,
    ) -> None:
        self.config = config
        self._http = http_client
        self.telemetry = TelemetryRecorder(
            log_size=config.telemetry_log_size,
            snapshot_size=config.telemetry_snapshot_size,
        )
        self.snapshots = JobSnapshotStore(storage, key=config.storage_key, limit=config.retention)
        self.store = JobStore(self.snapshots)
        self.client = SchedulerClient(
            http_client,
            self.telemetry,
            base_url=config.api_base_url,
            timeout=config.request_timeout,
        )
        self.polling = PollingController(self.client, self.store, interval=config.poll_interval)
        self.health = HealthMonitor(self.client, interval=config.health_interval)
        self.jobs = JobManager(self.client, self.store, self.polling)
        self._closed = False

    async def __aenter__(self) -> "JobWatchEngine":
        await self._http.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
        return False

    @property
    def closed(self) -> bool:
        return self._closed

    async def aclose(self) -> None:
        """Stop timers, drop listeners and close the transport. Idempotent."""
        if self._closed:
            return
        self._closed = True
        await self.polling.shutdown()
        await self.health.stop()
        self.store.clear_listeners()
        self.telemetry.clear_listeners()
        self.health.clear_listeners()
        await self._http.close()
        logger.debug("[engine] closed")


def create_engine(
    config: Optional[EngineConfig] = None,
    http_client: Optional[HttpClientPort] = None,
    storage: Optional[KeyValueStorePort] = None,
) -> JobWatchEngine:
    """Build an engine from app settings, with optional injected ports."""
    config = config or EngineConfig.from_app_settings(app_settings)
    http_client = http_client or AioHttpClientAdapter(total_timeout=config.request_timeout)
    storage = storage or FileKeyValueStore(app_settings.JOBWATCH_STORAGE_DIR)
    return JobWatchEngine(config, http_client, storage)
