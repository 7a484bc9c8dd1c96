"""Configuration models for core components.

Pydantic-based configuration consolidating the settings the engine's
managers need, so composition roots and tests can inject them explicitly.
"""

from pydantic import BaseModel, Field


class EngineConfig(BaseModel):
    """Configuration for the job watch engine.

    Attributes:
        api_base_url: Scheduler base URL without trailing slash
        request_timeout: Total timeout in seconds for a single scheduler request
        poll_interval: Seconds between job status probes
        health_interval: Seconds between liveness probes
        storage_key: Durable storage key holding the recent-jobs snapshot
        retention: Maximum number of jobs kept in memory and on disk
        telemetry_log_size: Entries kept in the telemetry log
        telemetry_snapshot_size: Entries exposed by the telemetry snapshot
    """

    api_base_url: str = Field(
        default="http://localhost:8086",
        description="Base URL of the remote scheduler API",
    )

    request_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Total timeout in seconds for one scheduler request",
    )

    poll_interval: float = Field(
        default=1.0,
        gt=0,
        description="Interval in seconds between job status polling requests",
    )

    health_interval: float = Field(
        default=5.0,
        gt=0,
        description="Interval in seconds between liveness probes",
    )

    storage_key: str = Field(
        default="ftts_recent_jobs",
        min_length=1,
        description="Durable storage key of the recent-jobs snapshot",
    )

    retention: int = Field(
        default=50,
        ge=1,
        description="Maximum number of job records kept (oldest evicted first)",
    )

    telemetry_log_size: int = Field(
        default=20,
        ge=1,
        description="Maximum number of API call records kept in the telemetry log",
    )

    telemetry_snapshot_size: int = Field(
        default=10,
        ge=1,
        description="Number of most recent API call records exposed to subscribers",
    )

    model_config = {
        "frozen": True,
        "extra": "forbid",
    }

    @classmethod
    def from_app_settings(cls, settings) -> "EngineConfig":
        """Factory method to construct config from a JobWatchSettings instance.

        Args:
            settings: JobWatchSettings instance from core.settings

        Returns:
            EngineConfig with values from app settings
        """
        return cls(
            api_base_url=settings.JOBWATCH_API_BASE_URL,
            request_timeout=settings.JOBWATCH_REQUEST_TIMEOUT,
            poll_interval=settings.JOBWATCH_POLL_INTERVAL,
            health_interval=settings.JOBWATCH_HEALTH_INTERVAL,
            storage_key=settings.JOBWATCH_STORAGE_KEY,
            # retention and telemetry sizes use defaults (no settings exist)
        )
