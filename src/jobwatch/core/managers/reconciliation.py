"""Pure reconciliation rules for the recent-jobs collection.

Both functions take the current collection (most-recent-first) and an
incoming record and return a new list; the input is never mutated. They
know nothing about storage, notification or the network, which keeps the
optimistic-replacement heuristic testable on plain lists.
"""
from __future__ import annotations

from typing import List, Optional, Sequence

from jobwatch.core.models.job import Job

DEFAULT_RETENTION = 50


def find_optimistic_match(jobs: Sequence[Job], incoming: Job) -> Optional[int]:
    """Index of the optimistic placeholder that `incoming` confirms, if any.

    Only an authoritative record carrying an idempotency key can confirm a
    placeholder. When several placeholders share the key the most recently
    inserted one (lowest index) is chosen; the others are left untouched.
    """
    if incoming.is_optimistic() or not incoming.idempotency_key:
        return None
    for index, job in enumerate(jobs):
        if job.is_optimistic() and job.idempotency_key == incoming.idempotency_key:
            return index
    return None


def reconcile(jobs: Sequence[Job], incoming: Job, limit: int = DEFAULT_RETENTION) -> List[Job]:
    """Insert `incoming` as the most recent record.

    - A record with the same id is removed (the incoming one supersedes it).
    - An optimistic placeholder confirmed by `incoming` is removed.
    - The result is truncated to `limit` records, oldest dropped.
    """
    placeholder = find_optimistic_match(jobs, incoming)
    kept = [
        job
        for index, job in enumerate(jobs)
        if job.id != incoming.id and index != placeholder
    ]
    return [incoming, *kept][:limit]


def replace(jobs: Sequence[Job], incoming: Job) -> List[Job]:
    """Swap the record with `incoming.id` for `incoming`, keeping its position.

    Replacement is wholesale: the incoming record is authoritative-complete.
    Unknown ids leave the collection unchanged.
    """
    return [incoming if job.id == incoming.id else job for job in jobs]
