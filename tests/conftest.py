"""Shared fixtures for the jobwatch test suite."""

import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from jobwatch.adapters.key_value_store_inmemory import InMemoryKeyValueStore
from jobwatch.core.managers.job_snapshot import JobSnapshotStore
from jobwatch.core.managers.job_store import JobStore
from jobwatch.core.managers.scheduler_client import SchedulerClient
from jobwatch.core.managers.telemetry import TelemetryRecorder
from jobwatch.core.models.job import Job, JobStatus

BASE_URL = "http://scheduler.test"


def _make_job(job_id: str = "srv-1", status: JobStatus = JobStatus.PENDING, **overrides) -> Job:
    now = datetime.now(timezone.utc)
    fields = dict(
        id=job_id,
        type="demo",
        payload={"msg": "hi"},
        status=status,
        attempts=0,
        max_attempts=3,
        next_run_at=now,
        created_at=now,
        updated_at=now,
    )
    fields.update(overrides)
    return Job(**fields)


@pytest.fixture
def job_factory():
    """Build Job records with sensible defaults; keyword overrides win."""
    return _make_job


@pytest.fixture
def response_factory():
    """Build transport responses shaped like HttpClientPort.request results."""

    def make(status: int = 200, body=""):
        if not isinstance(body, str):
            body = json.dumps(body)
        return {"status": status, "headers": {}, "body": body}

    return make


@pytest.fixture
def kv():
    return InMemoryKeyValueStore()


@pytest.fixture
def snapshots(kv):
    return JobSnapshotStore(kv)


@pytest.fixture
def store(snapshots):
    return JobStore(snapshots)


@pytest.fixture
def telemetry():
    return TelemetryRecorder()


@pytest.fixture
def mock_http_client():
    """Create mock HTTP client."""
    return AsyncMock()


@pytest.fixture
def scheduler_client(mock_http_client, telemetry):
    return SchedulerClient(mock_http_client, telemetry, base_url=BASE_URL)
