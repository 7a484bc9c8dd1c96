"""JobSnapshotStore: durable snapshot of the recent-jobs list.

One key holds a JSON array of at most `limit` jobs, most-recent-first.
Reads never raise: an absent key, unparseable JSON or a schema mismatch
all yield an empty list. Write failures are logged and swallowed, so a
broken disk never blocks the operator's workflow.
"""
from __future__ import annotations

import json
from typing import List, Sequence

from pydantic import TypeAdapter, ValidationError

from jobwatch.core.exceptions import PersistenceError
from jobwatch.core.interfaces.key_value_store import KeyValueStorePort
from jobwatch.core.managers.reconciliation import DEFAULT_RETENTION
from jobwatch.core.models.job import Job
from jobwatch.core.settings import logger

DEFAULT_STORAGE_KEY = "ftts_recent_jobs"

_jobs_adapter = TypeAdapter(List[Job])


class JobSnapshotStore:
    def __init__(
        self,
        storage: KeyValueStorePort,
        key: str = DEFAULT_STORAGE_KEY,
        limit: int = DEFAULT_RETENTION,
    ) -> None:
        self._storage = storage
        self.key = key
        self.limit = limit

    def save(self, jobs: Sequence[Job]) -> None:
        """Overwrite the snapshot with the first `limit` jobs."""
        document = json.dumps([job.to_wire() for job in list(jobs)[: self.limit]])
        try:
            self._storage.set(self.key, document)
        except PersistenceError as exc:
            logger.warning("[snapshot] save failed key=%s err=%s", self.key, exc.message)

    def load(self) -> List[Job]:
        """Return the stored jobs, or an empty list if nothing usable is stored."""
        try:
            raw = self._storage.get(self.key)
        except PersistenceError as exc:
            logger.warning("[snapshot] load failed key=%s err=%s", self.key, exc.message)
            return []
        if not raw:
            return []
        try:
            # validate_json also rejects malformed JSON with a ValidationError
            jobs = _jobs_adapter.validate_json(raw)
        except ValidationError as exc:
            logger.warning(
                "[snapshot] discarding unreadable snapshot key=%s errors=%s",
                self.key,
                exc.error_count(),
            )
            return []
        logger.debug("[snapshot] loaded %s jobs key=%s", len(jobs), self.key)
        return jobs[: self.limit]
