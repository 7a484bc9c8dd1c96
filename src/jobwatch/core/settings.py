from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings
from rich import print

from jobwatch.adapters.logging_adapter import LoggingAdapter
from jobwatch.core.interfaces.logging import LoggingPort


# using pydantic_settings to manage environment variables
# and do automatic type casting in a central place
class JobWatchSettings(BaseSettings):
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }
    JOBWATCH_LOG_LEVEL: str = "INFO"
    JOBWATCH_API_BASE_URL: str = "http://localhost:8086"
    # seconds
    JOBWATCH_REQUEST_TIMEOUT: float = 10.0
    JOBWATCH_POLL_INTERVAL: float = 1.0
    JOBWATCH_HEALTH_INTERVAL: float = 5.0
    JOBWATCH_STORAGE_DIR: Path = Path.home() / ".jobwatch"
    JOBWATCH_STORAGE_KEY: str = "ftts_recent_jobs"

    def print_settings(self, logger: LoggingPort):
        """Prints the settings for debugging purposes"""
        logger.info("JobWatch Settings:")
        print(self)

    @field_validator("JOBWATCH_API_BASE_URL", mode="before")
    def strip_trailing_slash(cls, value: str) -> str:
        """Paths are appended as '/jobs', so the base must not end with '/'."""
        return str(value).rstrip("/")


app_settings = JobWatchSettings()

logger: LoggingPort = LoggingAdapter("jobwatch", app_settings.JOBWATCH_LOG_LEVEL)
