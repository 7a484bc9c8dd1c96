from abc import ABC, abstractmethod


class LoggingPort(ABC):
    """Minimal logging facade used by core managers and adapters."""

    @abstractmethod
    def debug(self, msg: str, *args):
        pass

    @abstractmethod
    def info(self, msg: str, *args):
        pass

    @abstractmethod
    def warning(self, msg: str, *args):
        pass

    @abstractmethod
    def error(self, msg: str, *args):
        pass

    @abstractmethod
    def exception(self, msg: str, *args):
        """Log at error level including the active exception's traceback."""
        pass
