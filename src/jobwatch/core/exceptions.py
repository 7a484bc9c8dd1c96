from typing import Optional


class JobWatchError(Exception):
    """Base exception for the job watch client.

    Attributes:
        message: Human-readable error description, suitable for the operator
    """
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# Remote scheduler call failures

class SchedulerApiError(JobWatchError):
    """Base exception for failed calls to the remote scheduler.

    Attributes:
        status: HTTP status code of the response (None if none was received)
        method: HTTP method of the failed call
        path: Request path relative to the scheduler base URL
    """
    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        method: Optional[str] = None,
        path: Optional[str] = None,
    ):
        self.status = status
        self.method = method
        self.path = path
        super().__init__(message)


class TransportError(SchedulerApiError):
    """Raised when a request never received a response.

    Covers connection refused, DNS failures and timeouts. `status` is always None.
    """
    def __init__(self, message: str, method: Optional[str] = None, path: Optional[str] = None):
        super().__init__(message=message, status=None, method=method, path=path)


class HTTPError(SchedulerApiError):
    """Raised when the scheduler answered with a non-success status.

    The message is the response body text, or `HTTP <status>` when the body is empty.
    """
    def __init__(self, status: int, message: str, method: Optional[str] = None, path: Optional[str] = None):
        super().__init__(message=message, status=status, method=method, path=path)


class ResponseDecodeError(SchedulerApiError):
    """Raised when a success response does not carry the expected JSON document."""


# Local failures

class PayloadValidationError(JobWatchError):
    """Raised for locally invalid input (e.g. malformed payload JSON).

    Detected before any network call is made.
    """


class PersistenceError(JobWatchError):
    """Raised by key-value storage adapters when reading or writing fails.

    Attributes:
        key: Storage key involved in the failed operation
    """
    def __init__(self, message: str, key: Optional[str] = None):
        self.key = key
        super().__init__(message)
