"""JobManager: operator workflows on top of store, client and polling.

Responsibilities:
1. Validate the operator's payload locally (nothing is sent if it is not JSON).
2. Insert an optimistic PENDING record so the job is visible immediately.
3. Create the job on the scheduler, forwarding the idempotency key.
4. Reconcile the authoritative record with the optimistic placeholder.
5. Refresh single jobs on demand and start/stop background polling.
"""

from __future__ import annotations

import json
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from jobwatch.core.exceptions import PayloadValidationError
from jobwatch.core.managers.job_store import JobStore
from jobwatch.core.managers.polling import PollingController
from jobwatch.core.managers.scheduler_client import SchedulerClient
from jobwatch.core.models.job import (
    OPTIMISTIC_ID_PREFIX,
    CreateJobRequest,
    Job,
    JobStatus,
    is_optimistic_id,
)
from jobwatch.core.settings import logger


def parse_payload(payload: Any) -> Any:
    """Decode a JSON payload given as text; other values pass through.

    Raises PayloadValidationError for malformed JSON.
    """
    if not isinstance(payload, (str, bytes, bytearray)):
        return payload
    try:
        return json.loads(payload)
    except ValueError as exc:
        raise PayloadValidationError(f"Invalid JSON payload: {exc}") from exc


class JobManager:
    """Orchestrates job submission, refresh and watching for the operator."""

    def __init__(
        self,
        client: SchedulerClient,
        store: JobStore,
        polling: PollingController,
    ) -> None:
        self._client = client
        self._store = store
        self._polling = polling

    # ---------------- Submission -----------------
    async def submit(
        self,
        job_type: str,
        payload: Any,
        max_attempts: int = 3,
        idempotency_key: Optional[str] = None,
        auto_key: bool = False,
    ) -> Job:
        """Create a job optimistically, then reconcile with the scheduler's record.

        Transport and HTTP errors propagate; the optimistic record then stays
        in the store as an orphan.
        """
        decoded = parse_payload(payload)
        request = CreateJobRequest(type=job_type, payload=decoded, max_attempts=max_attempts)

        if auto_key:
            key: Optional[str] = str(uuid.uuid4())
        else:
            key = (idempotency_key or "").strip() or None

        optimistic = self._optimistic_job(request, key)
        self._store.upsert(optimistic)
        logger.debug(f"[job:submit] optimistic insert job_id={optimistic.id} key={key}")

        job = await self._client.create_job(request, idempotency_key=key)
        self._store.upsert(job)
        logger.info(f"[job:submit] created job_id={job.id} replaces={optimistic.id}")
        return job

    def _optimistic_job(self, request: CreateJobRequest, key: Optional[str]) -> Job:
        now = datetime.now(timezone.utc)
        stamp = int(time.time() * 1000)
        # Two submissions in the same millisecond must not collapse into one record
        while self._store.get(f"{OPTIMISTIC_ID_PREFIX}{stamp}") is not None:
            stamp += 1
        return Job(
            id=f"{OPTIMISTIC_ID_PREFIX}{stamp}",
            type=request.type,
            payload=request.payload,
            status=JobStatus.PENDING,
            attempts=0,
            max_attempts=request.max_attempts,
            next_run_at=now,
            idempotency_key=key,
            created_at=now,
            updated_at=now,
        )

    # ---------------- Refresh / watch -----------------
    async def refresh(self, job_id: str) -> Optional[Job]:
        """Fetch the authoritative record and merge it; None for optimistic ids.

        A job not cached yet (e.g. looked up by id) is inserted as most recent.
        """
        if is_optimistic_id(job_id):
            return None
        job = await self._client.get_job(job_id)
        if not self._store.merge(job):
            self._store.upsert(job)
        return job

    def watch(self, job_id: str) -> bool:
        return self._polling.start(job_id)

    def unwatch(self, job_id: str) -> bool:
        return self._polling.stop(job_id)
