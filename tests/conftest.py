"""Shared fixtures: a controllable clock and a scripted request executor."""

from typing import Any

import pytest

from neon_access.config import Settings
from neon_access.entities import RequestDescriptor
from neon_access.errors import ClientError
from neon_access.repositories import InMemoryCacheRepository
from neon_access.services import NeonQueryPlanner

API = "/api/v0"


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeExecutor:
    """RequestExecutor that answers from a route table.

    Routes map an endpoint to a payload, or to an exception instance that
    is raised instead. Unknown endpoints answer 404.
    """

    def __init__(self, routes: dict[str, Any] | None = None) -> None:
        self.routes: dict[str, Any] = dict(routes or {})
        self.calls: list[RequestDescriptor] = []
        self.closed = False

    def _answer(self, descriptor: RequestDescriptor) -> Any:
        self.calls.append(descriptor)
        if descriptor.endpoint not in self.routes:
            raise ClientError("NEON API Error: Not found (Status: 404)", status=404)
        answer = self.routes[descriptor.endpoint]
        if isinstance(answer, Exception):
            raise answer
        return answer

    async def execute(self, descriptor: RequestDescriptor) -> Any:
        return self._answer(descriptor)

    async def probe(self, descriptor: RequestDescriptor) -> dict[str, Any]:
        return self._answer(descriptor)

    async def close(self) -> None:
        self.closed = True

    def endpoints(self) -> list[str]:
        return [d.endpoint for d in self.calls]


def location(name: str, site: str, type_: str = "", description: str = "", **extra: Any) -> dict:
    """A location record as the remote API returns it."""
    return {
        "locationName": name,
        "siteCode": site,
        "locationType": type_,
        "locationDescription": description,
        **extra,
    }


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> InMemoryCacheRepository:
    return InMemoryCacheRepository(default_ttl=3600, clock=clock)


@pytest.fixture
def config() -> Settings:
    return Settings(
        cache_ttl=3600,
        data_query_ttl=1800,
        ttl_overrides={},
        hierarchy_child_cap=20,
        hierarchy_max_depth=3,
        cross_site_cap=10,
    )


@pytest.fixture
def executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def planner(
    executor: FakeExecutor, cache: InMemoryCacheRepository, config: Settings
) -> NeonQueryPlanner:
    return NeonQueryPlanner.create(executor=executor, cache=cache, config=config)
