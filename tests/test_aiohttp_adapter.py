import asyncio

import aiohttp
import pytest
from aioresponses import aioresponses

from jobwatch.adapters.aiohttp_client_adapter import AioHttpClientAdapter
from jobwatch.core.exceptions import TransportError

"""
Tests for AioHttpClientAdapter behavior.

The adapter is a thin transport: it reports whatever the scheduler answered
and only raises when no answer arrived. Expected outcomes:
- Any HTTP response, success or error status, is returned as a dict with
  'status', 'headers' and the raw text 'body'.
- Connection errors and timeouts map to TransportError so callers can record
  a null status and show an advisory message.
"""


@pytest.mark.asyncio
async def test_get_text_response():
    # Happy path: /healthz answers a plain text body.
    url = "http://scheduler.test/healthz"
    with aioresponses() as m:
        m.get(url, body="ok", status=200)

        async with AioHttpClientAdapter() as client:
            resp = await client.request("GET", url)
            assert resp["status"] == 200
            assert resp["body"] == "ok"


@pytest.mark.asyncio
async def test_post_returns_json_body_as_text():
    # JSON is not decoded here; the scheduler client owns the schema.
    url = "http://scheduler.test/jobs"
    with aioresponses() as m:
        m.post(url, payload={"id": "srv-1"}, status=201)

        async with AioHttpClientAdapter() as client:
            resp = await client.request(
                "POST", url, json={"type": "demo"}, headers={"Idempotency-Key": "abc"}
            )
            assert resp["status"] == 201
            assert '"srv-1"' in resp["body"]


@pytest.mark.asyncio
async def test_error_status_is_returned_not_raised():
    # Upstream HTTP error: the caller must see the status and body text.
    url = "http://scheduler.test/jobs/missing"
    with aioresponses() as m:
        m.get(url, status=404, body="job not found")

        async with AioHttpClientAdapter() as client:
            resp = await client.request("GET", url)
            assert resp["status"] == 404
            assert resp["body"] == "job not found"


@pytest.mark.asyncio
async def test_connection_error_maps_to_transport_error():
    url = "http://scheduler.test/healthz"
    with aioresponses() as m:
        m.get(url, exception=aiohttp.ClientConnectionError("refused"))

        async with AioHttpClientAdapter() as client:
            with pytest.raises(TransportError) as excinfo:
                await client.request("GET", url)
            assert excinfo.value.status is None


@pytest.mark.asyncio
async def test_timeout_maps_to_transport_error():
    url = "http://scheduler.test/slow"
    with aioresponses() as m:
        # simulate timeout by raising asyncio.TimeoutError
        m.get(url, exception=asyncio.TimeoutError())

        async with AioHttpClientAdapter() as client:
            with pytest.raises(TransportError) as excinfo:
                await client.request("GET", url, timeout=0.5)
            assert "timed out" in excinfo.value.message


@pytest.mark.asyncio
async def test_request_requires_open_session():
    client = AioHttpClientAdapter()
    with pytest.raises(RuntimeError):
        await client.request("GET", "http://scheduler.test/healthz")


@pytest.mark.asyncio
async def test_close_is_idempotent():
    client = AioHttpClientAdapter()
    await client.open()
    await client.close()
    await client.close()


@pytest.mark.asyncio
async def test_undecodable_body_is_returned_with_replacement_characters():
    # A garbled answer is still an answer: the status must reach the caller.
    url = "http://scheduler.test/jobs/srv-1"
    with aioresponses() as m:
        m.get(url, status=200, body=b"\xff\xfe\xfa")

        async with AioHttpClientAdapter() as client:
            resp = await client.request("GET", url)
            assert resp["status"] == 200
            assert resp["body"] == "�" * 3
