"""JobStore: the in-memory recent-jobs collection.

Holds jobs most-recent-first, bounded to the snapshot store's retention.
Every mutation persists a snapshot and then notifies subscribers; the
reconciliation rules themselves live in `reconciliation` as pure functions.

Mutations are synchronous. Under a single event loop nothing can interleave
with them, so no lock is taken. A multi-threaded host must serialize calls.
"""
from __future__ import annotations

from collections import Counter
from typing import Dict, List, Optional, Tuple

from jobwatch.core.interfaces.observers import ChangeListener, Unsubscribe
from jobwatch.core.managers.job_snapshot import JobSnapshotStore
from jobwatch.core.managers.observers import ChangeNotifier
from jobwatch.core.managers.reconciliation import reconcile, replace
from jobwatch.core.models.job import Job, JobStatus
from jobwatch.core.settings import logger


class JobStore:
    def __init__(self, snapshots: JobSnapshotStore) -> None:
        self._snapshots = snapshots
        self._jobs: List[Job] = snapshots.load()
        self._notifier = ChangeNotifier("store")

    @property
    def retention(self) -> int:
        return self._snapshots.limit

    # ---------------- Mutations -----------------
    def upsert(self, job: Job) -> Job:
        """Insert job at the head, superseding its id and any placeholder it confirms."""
        before = len(self._jobs)
        self._jobs = reconcile(self._jobs, job, limit=self.retention)
        logger.debug(
            "[store] upsert job_id=%s status=%s size=%s->%s",
            job.id,
            job.status,
            before,
            len(self._jobs),
        )
        self._commit()
        return job

    def merge(self, job: Job) -> bool:
        """Replace the stored record for job.id wholesale.

        Returns False (and changes nothing) when the id is unknown.
        """
        if self.get(job.id) is None:
            logger.debug("[store] merge ignored unknown job_id=%s", job.id)
            return False
        self._jobs = replace(self._jobs, job)
        logger.debug("[store] merge job_id=%s status=%s", job.id, job.status)
        self._commit()
        return True

    def _commit(self) -> None:
        self._snapshots.save(self._jobs)
        self._notifier.notify()

    # ---------------- Queries -----------------
    def list(self) -> List[Job]:
        """Jobs most-recent-first (a copy; mutating it does not affect the store)."""
        return list(self._jobs)

    def get(self, job_id: str) -> Optional[Job]:
        for job in self._jobs:
            if job.id == job_id:
                return job
        return None

    def __len__(self) -> int:
        return len(self._jobs)

    def status_counts(self) -> Dict[JobStatus, int]:
        counts = Counter(job.status for job in self._jobs)
        return {status: counts.get(status, 0) for status in JobStatus}

    def creation_timeline(self, limit: int = 15) -> List[Tuple[str, int]]:
        """Jobs per creation minute as ("HH:MM", count), last `limit` buckets."""
        buckets: Dict[str, int] = {}
        for job in self._jobs:
            key = job.created_at.strftime("%H:%M")
            buckets[key] = buckets.get(key, 0) + 1
        return list(buckets.items())[-limit:]

    # ---------------- Observation -----------------
    def subscribe(self, listener: ChangeListener) -> Unsubscribe:
        return self._notifier.subscribe(listener)

    def clear_listeners(self) -> None:
        self._notifier.clear()
