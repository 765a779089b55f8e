"""
Tests for the HTTP request executor: status classification, retry and backoff.
"""

import json

import httpx
import pytest

from neon_access.entities import RequestDescriptor
from neon_access.errors import ClientError, ExhaustedRetriesError, TransientError
from neon_access.protocols import RequestExecutor
from neon_access.repositories import HttpRequestExecutor

BASE_URL = "https://data.example.org"


def respond(status_code: int, **kwargs):
    """Build a fresh response per request, since retries resend."""
    return lambda: httpx.Response(status_code, **kwargs)


class Recorder:
    """MockTransport handler that replays scripted responses in order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        answer = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(answer, Exception):
            raise answer
        return answer()


def make_executor(recorder: Recorder, delays: list[float]) -> HttpRequestExecutor:
    async def fake_sleep(seconds: float) -> None:
        delays.append(seconds)

    client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(recorder))
    return HttpRequestExecutor(client=client, attempts=3, base_delay=1.0, sleep=fake_sleep)


def get_site() -> RequestDescriptor:
    return RequestDescriptor(operation="get_site", endpoint="/api/v0/sites/SRER")


def test_satisfies_protocol():
    assert isinstance(HttpRequestExecutor(attempts=1), RequestExecutor)


def test_attempts_must_be_positive():
    with pytest.raises(ValueError):
        HttpRequestExecutor(attempts=0)


@pytest.mark.asyncio
async def test_success_unwraps_data_envelope():
    recorder = Recorder(respond(200, json={"data": {"siteCode": "SRER"}}))
    executor = make_executor(recorder, [])

    assert await executor.execute(get_site()) == {"siteCode": "SRER"}
    assert len(recorder.requests) == 1


@pytest.mark.asyncio
async def test_envelope_kept_when_unwrap_disabled():
    body = {"count": 1, "total": 10, "data": [{"taxonID": "ABC"}]}
    recorder = Recorder(respond(200, json=body))
    executor = make_executor(recorder, [])
    descriptor = RequestDescriptor(
        operation="search_taxonomy", endpoint="/api/v0/taxonomy", unwrap=False
    )

    assert await executor.execute(descriptor) == body


@pytest.mark.asyncio
async def test_client_error_is_not_retried():
    recorder = Recorder(respond(404, json={"detail": "Site not found"}))
    delays: list[float] = []
    executor = make_executor(recorder, delays)

    with pytest.raises(ClientError) as exc_info:
        await executor.execute(get_site())

    assert len(recorder.requests) == 1
    assert delays == []
    assert exc_info.value.status == 404
    assert exc_info.value.message == "NEON API Error: Site not found (Status: 404)"


@pytest.mark.asyncio
async def test_server_error_retried_with_linear_backoff():
    recorder = Recorder(respond(503, text="Service Unavailable"))
    delays: list[float] = []
    executor = make_executor(recorder, delays)

    with pytest.raises(ExhaustedRetriesError) as exc_info:
        await executor.execute(get_site())

    assert len(recorder.requests) == 3
    assert delays == [1.0, 2.0]
    assert exc_info.value.attempts == 3
    assert exc_info.value.status == 503
    assert isinstance(exc_info.value, TransientError)
    assert exc_info.value.message.startswith("Request failed after 3 attempts")
    assert isinstance(exc_info.value.last_error, TransientError)
    assert exc_info.value.last_error.status == 503


@pytest.mark.asyncio
async def test_transport_error_then_success_recovers():
    recorder = Recorder(
        httpx.ConnectError("connection refused"),
        respond(200, json={"data": {"siteCode": "SRER"}}),
    )
    delays: list[float] = []
    executor = make_executor(recorder, delays)

    assert await executor.execute(get_site()) == {"siteCode": "SRER"}
    assert len(recorder.requests) == 2
    assert delays == [1.0]


@pytest.mark.asyncio
async def test_undecodable_body_is_transient():
    recorder = Recorder(respond(200, text="<html>oops</html>"))
    executor = make_executor(recorder, [])

    with pytest.raises(ExhaustedRetriesError):
        await executor.execute(get_site())
    assert len(recorder.requests) == 3


@pytest.mark.asyncio
async def test_query_items_become_repeated_params():
    recorder = Recorder(respond(200, json={"data": []}))
    executor = make_executor(recorder, [])
    descriptor = RequestDescriptor(
        operation="op",
        endpoint="/api/v0/x",
        params={"siteCode": ["SRER", "HARV"], "hierarchy": True, "skip": None},
    )

    await executor.execute(descriptor)

    sent = recorder.requests[0].url.params
    assert sent.get_list("siteCode") == ["SRER", "HARV"]
    assert sent["hierarchy"] == "true"
    assert "skip" not in sent


@pytest.mark.asyncio
async def test_post_sends_json_body():
    recorder = Recorder(respond(200, json={"data": {"siteCodes": []}}))
    executor = make_executor(recorder, [])
    body = {"productCode": "DP1.00001.001", "siteCodes": ["SRER", "HARV"]}
    descriptor = RequestDescriptor(
        operation="query_data", endpoint="/api/v0/data/query", method="POST", body=body
    )

    await executor.execute(descriptor)

    request = recorder.requests[0]
    assert request.method == "POST"
    assert json.loads(request.content) == body


@pytest.mark.asyncio
async def test_probe_reports_url_size_and_checksum():
    recorder = Recorder(respond(200, headers={"content-length": "2048", "etag": '"abc123"'}))
    executor = make_executor(recorder, [])
    descriptor = RequestDescriptor(
        operation="get_download_info",
        endpoint="/api/v0/data/DP1.00001.001/SRER/2023-01/file.csv",
        method="HEAD",
        cacheable=False,
    )

    info = await executor.probe(descriptor)

    assert recorder.requests[0].method == "HEAD"
    assert info == {
        "url": f"{BASE_URL}/api/v0/data/DP1.00001.001/SRER/2023-01/file.csv",
        "size": 2048,
        "checksum": '"abc123"',
    }


@pytest.mark.asyncio
async def test_probe_missing_file_is_client_error():
    recorder = Recorder(respond(404))
    executor = make_executor(recorder, [])
    descriptor = RequestDescriptor(
        operation="get_download_info",
        endpoint="/api/v0/data/DP1.00001.001/SRER/2023-01/missing.csv",
        method="HEAD",
    )

    with pytest.raises(ClientError, match="File not found: missing.csv"):
        await executor.probe(descriptor)
    assert len(recorder.requests) == 1


@pytest.mark.asyncio
async def test_close_releases_client():
    recorder = Recorder(respond(200, json={}))
    executor = make_executor(recorder, [])

    await executor.close()
    await executor.close()
