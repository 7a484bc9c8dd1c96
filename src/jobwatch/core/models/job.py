from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Any, Optional
from datetime import datetime, timezone
from enum import StrEnum

# Synthetic ids of records the scheduler has not confirmed yet
OPTIMISTIC_ID_PREFIX = "pending-"

MIN_MAX_ATTEMPTS = 1
MAX_MAX_ATTEMPTS = 10


class JobStatus(StrEnum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


TERMINAL_STATUSES = frozenset({JobStatus.SUCCESS, JobStatus.FAILED})


def is_optimistic_id(job_id: str) -> bool:
    return job_id.startswith(OPTIMISTIC_ID_PREFIX)


class Job(BaseModel):
    """Job record as cached by the client.

    Notes:
    - Authoritative records come from the scheduler; their `id` is opaque.
    - Optimistic records are synthesized locally before the scheduler confirms
      creation. Their id is `pending-<epoch ms>` and they start at attempts=0.
    - Lease and execution fields (`locked_by`, `started_at`, ...) are only ever
      populated by the scheduler.
    - Unknown fields sent by the scheduler are ignored so a newer server does
      not invalidate the local cache.
    """

    model_config = {"extra": "ignore"}

    id: str
    type: str
    payload: Any = None
    status: JobStatus = JobStatus.PENDING

    # Retry bookkeeping (owned by the scheduler)
    attempts: int = Field(default=0, ge=0)
    max_attempts: int = Field(default=MIN_MAX_ATTEMPTS, ge=0)
    next_run_at: Optional[datetime] = None

    idempotency_key: Optional[str] = None

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Distributed lease
    locked_by: Optional[str] = None
    locked_until: Optional[datetime] = None

    # Execution tracking
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    error_message: Optional[str] = None

    @model_validator(mode="after")
    def check_attempts(self) -> "Job":
        if self.attempts > self.max_attempts:
            raise ValueError(f"attempts ({self.attempts}) exceeds max_attempts ({self.max_attempts})")
        return self

    def is_optimistic(self) -> bool:
        return is_optimistic_id(self.id)

    def is_in_terminal_state(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def to_wire(self) -> dict[str, Any]:
        """JSON-compatible dict with ISO-8601 timestamps and no empty optionals."""
        return self.model_dump(mode="json", exclude_none=True)


class CreateJobRequest(BaseModel):
    """Body of `POST /jobs`."""

    type: str
    payload: Any = None
    max_attempts: int = 3

    @field_validator("max_attempts", mode="before")
    def clamp_max_attempts(cls, value: Any) -> int:
        """Keep max_attempts inside the operator form's 1..10 range."""
        return max(MIN_MAX_ATTEMPTS, min(MAX_MAX_ATTEMPTS, int(value)))
