# jobwatch/adapters/aiohttp_client_adapter.py
import asyncio
import aiohttp
from typing import Any, Dict, Optional

from jobwatch.core.interfaces.http_client import HttpClientPort
from jobwatch.core.exceptions import TransportError
from jobwatch.core.settings import logger


class AioHttpClientAdapter(HttpClientPort):
    def __init__(self, total_timeout: float = 10.0):
        self._session: Optional[aiohttp.ClientSession] = None
        # Per-field timeouts are fixed at init so callers only ever pass a total.
        self._default_total: float = total_timeout
        self._default_sock_read: float = total_timeout
        self._default_sock_connect: float = 5.0
        self._default_client_timeout = aiohttp.ClientTimeout(
            total=self._default_total,
            sock_read=self._default_sock_read,
            sock_connect=self._default_sock_connect,
        )

    async def __aenter__(self):
        """Async context manager entry"""
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.close()
        return False

    async def open(self) -> None:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()

    async def close(self) -> None:
        """Close the session"""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    def _timeout(self, timeout: float | None) -> aiohttp.ClientTimeout:
        if timeout is None:
            return self._default_client_timeout
        # Keep adapter-level sock_connect but apply the provided total
        return aiohttp.ClientTimeout(
            total=timeout,
            sock_read=timeout,
            sock_connect=self._default_sock_connect,
        )

    async def request(
        self,
        method: str,
        url: str,
        json: Any = None,
        headers: Dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Dict[str, Any]:
        if self._session is None:
            raise RuntimeError("HTTP client not initialized. Use 'async with' context manager.")

        kwargs: Dict[str, Any] = {"timeout": self._timeout(timeout), "headers": headers}
        if json is not None:
            kwargs["json"] = json

        try:
            async with self._session.request(method, url, **kwargs) as response:
                # Body is returned as text; the caller decides how to parse it.
                # Undecodable bytes are replaced so a garbled answer still counts as a response.
                body = await response.text(errors="replace")
                return {
                    "status": response.status,
                    "headers": dict(response.headers),
                    "body": body,
                }

        except asyncio.TimeoutError:
            logger.error("Timeout when requesting scheduler. Method: %s, URL: %s", method, url)
            raise TransportError("The request to the scheduler timed out.", method=method, path=url)

        except aiohttp.ClientError as client_error:
            logger.error(
                "Connection error when requesting scheduler. Method: %s, URL: %s, Error: %s",
                method,
                url,
                str(client_error),
            )
            raise TransportError(
                f"There was a connection error with the scheduler: {client_error}",
                method=method,
                path=url,
            )
