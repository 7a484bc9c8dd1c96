import logging

from jobwatch.core.interfaces.logging import LoggingPort
from jobwatch.core.logging_config import coerce_level


class LoggingAdapter(LoggingPort):
    """Concrete logging adapter.

    Delegates to Python's logging. It does NOT add its own handlers so that
    `configure_logging` at the composition root controls sinks. The
    correlation id is injected by the root handlers' filter; we simply emit.
    """

    def __init__(self, name: str = "jobwatch", log_level: int | str = logging.INFO):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(coerce_level(log_level))
        # Bubble up to root handlers (separate stdout/stderr sinks)
        self.logger.propagate = True
        self.logger.debug("Initialized logger name=%s level=%s", name, self.logger.level)

    def debug(self, msg: str, *args):
        self.logger.debug(msg, *args)

    def info(self, msg: str, *args):
        self.logger.info(msg, *args)

    def warning(self, msg: str, *args):
        self.logger.warning(msg, *args)

    def error(self, msg: str, *args):
        self.logger.error(msg, *args)

    def exception(self, msg: str, *args):
        self.logger.exception(msg, *args)
