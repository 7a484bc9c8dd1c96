"""SchedulerClient: the remote scheduler API as seen by the engine.

Wraps an `HttpClientPort` and records every call in the `TelemetryRecorder`:

* a response arrived: one record with its status and no error, even when
  the status is an error status;
* no response: one record with status None and the advisory message as error.

Duration is wall-clock time until the response (or failure), rounded to
whole milliseconds.
"""
from __future__ import annotations

import time
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote

from pydantic import ValidationError

from jobwatch.core.exceptions import (
    HTTPError,
    JobWatchError,
    ResponseDecodeError,
    TransportError,
)
from jobwatch.core.interfaces.http_client import HttpClientPort
from jobwatch.core.managers.telemetry import TelemetryRecorder
from jobwatch.core.models.api_call import ApiCallRecord
from jobwatch.core.models.job import CreateJobRequest, Job
from jobwatch.core.settings import logger

HEALTH_PATH = "/healthz"
JOBS_PATH = "/jobs"


def network_advisory(base_url: str) -> str:
    return (
        f"Network error: the scheduler at {base_url} is unreachable. "
        "Ensure the backend is running and the base URL is correct."
    )


class SchedulerClient:
    def __init__(
        self,
        http_client: HttpClientPort,
        telemetry: TelemetryRecorder,
        base_url: str,
        timeout: float | None = None,
    ) -> None:
        self._http = http_client
        self._telemetry = telemetry
        self.base_url = base_url.rstrip("/")
        self._timeout = timeout

    # ---------------- Operations -----------------
    async def check_health(self) -> bool:
        """True iff /healthz answers 2xx with body 'ok'; never raises."""
        try:
            _, body = await self._fetch_text("GET", HEALTH_PATH)
        except JobWatchError as exc:
            logger.debug("[client] health probe failed status=%s err=%s", getattr(exc, "status", None), exc.message)
            return False
        return body.strip() == "ok"

    async def create_job(self, request: CreateJobRequest, idempotency_key: Optional[str] = None) -> Job:
        headers = {"Content-Type": "application/json"}
        if idempotency_key:
            headers["Idempotency-Key"] = idempotency_key
        status, body = await self._fetch_text(
            "POST",
            JOBS_PATH,
            json=request.model_dump(mode="json"),
            headers=headers,
        )
        job = self._decode_job(body, status, "POST", JOBS_PATH)
        logger.info("[client] job created job_id=%s type=%s", job.id, job.type)
        return job

    async def get_job(self, job_id: str) -> Job:
        path = f"{JOBS_PATH}/{quote(job_id, safe='')}"
        status, body = await self._fetch_text("GET", path)
        return self._decode_job(body, status, "GET", path)

    # ---------------- Transport -----------------
    async def _fetch_text(
        self,
        method: str,
        path: str,
        json: Any = None,
        headers: Dict[str, str] | None = None,
    ) -> Tuple[int, str]:
        """Send one request, record it, and return the 2xx status and body text.

        Raises TransportError when nothing came back and HTTPError for non-2xx.
        """
        url = f"{self.base_url}{path}"
        start = time.perf_counter()
        try:
            resp = await self._http.request(method, url, json=json, headers=headers, timeout=self._timeout)
        except TransportError as exc:
            message = network_advisory(self.base_url)
            self._record(method, path, None, start, error=message)
            logger.debug("[client] transport failure method=%s path=%s err=%s", method, path, exc.message)
            raise TransportError(message, method=method, path=path) from exc

        status = int(resp["status"])
        self._record(method, path, status, start)

        body = resp.get("body") or ""
        if not 200 <= status < 300:
            message = body.strip() or f"HTTP {status}"
            logger.debug("[client] http error method=%s path=%s status=%s", method, path, status)
            raise HTTPError(status, message, method=method, path=path)
        return status, body

    def _record(
        self,
        method: str,
        path: str,
        status: Optional[int],
        start: float,
        error: Optional[str] = None,
    ) -> None:
        duration = round((time.perf_counter() - start) * 1000)
        self._telemetry.record(
            ApiCallRecord(
                method=method,
                path=path,
                status=status,
                duration=max(0, duration),
                error=error,
            )
        )

    @staticmethod
    def _decode_job(body: str, status: int, method: str, path: str) -> Job:
        try:
            return Job.model_validate_json(body)
        except ValidationError as exc:
            logger.error("[client] unexpected job document method=%s path=%s content=%s", method, path, body[:500])
            raise ResponseDecodeError(
                f"The scheduler returned an invalid job document: {exc.error_count()} error(s)",
                status=status,
                method=method,
                path=path,
            ) from exc
