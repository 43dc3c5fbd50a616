"""Shared fixtures: common metadata, a fake clock and a capturing collector."""

import asyncio
import time

import httpx
import pytest

from dynamo.identity import CommonMetadata
from dynamo.serializer import deserialize_batch


class FakeClock:
    """Manually advanced clock whose sleep just moves time forward."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: list[float] = []

    def time(self) -> float:
        return self.now

    async def sleep(self, seconds: float):
        self.sleeps.append(seconds)
        self.now += seconds


class Collector:
    """Stands in for Vector: records every POSTed batch.

    *fail_on* lists 1-based request numbers that raise a transport error.
    *delay* makes every response take that many seconds, like a slow sink.
    """

    def __init__(self, status_code: int = 202, fail_on=(), delay: float = 0.0):
        self.requests: list[httpx.Request] = []
        self.arrivals: list[float] = []
        self.batches: list[list[dict]] = []
        self._status_code = status_code
        self._fail_on = set(fail_on)
        self._delay = delay

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.arrivals.append(time.monotonic())
        if self._delay:
            await asyncio.sleep(self._delay)
        if len(self.requests) in self._fail_on:
            raise httpx.ConnectError("connection refused", request=request)
        self.batches.append(deserialize_batch(request.content))
        return httpx.Response(self._status_code)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def metadata():
    return CommonMetadata(hostname="test-host")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def collector():
    return Collector()
