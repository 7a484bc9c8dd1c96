from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


class ApiCallRecord(BaseModel):
    """One completed outbound call to the scheduler.

    `status` is None when no response was received; `error` then carries the
    advisory message shown to the operator. Records are immutable.
    """

    model_config = {"frozen": True}

    method: str
    path: str
    status: Optional[int] = None
    duration: int = Field(ge=0, description="Wall-clock duration in whole milliseconds")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    error: Optional[str] = None

    def is_success(self) -> bool:
        return self.status is not None and self.status < 400
