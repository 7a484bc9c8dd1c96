# jobwatch/core/interfaces/http_client.py
from abc import ABC, abstractmethod
from typing import Any, Dict


class HttpClientPort(ABC):
    @abstractmethod
    async def __aenter__(self) -> "HttpClientPort":
        """Async context manager entry method"""
        pass

    @abstractmethod
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit method"""
        pass

    @abstractmethod
    async def request(
        self,
        method: str,
        url: str,
        json: Any = None,
        headers: Dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Dict[str, Any]:
        """Send a request and return a dict with keys: 'status' (int),
        'headers' (dict) and 'body' (raw response text).

        Non-2xx responses are returned, not raised; callers inspect 'status'.
        Raises TransportError when no response was received at all.

        The timeout is optional; adapters may use an internal default
        when timeout is None.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the HTTP client session"""
        pass
