from __future__ import annotations

from typing import Any, List, Tuple, Union

import httpx
import pytest
from fastapi.testclient import TestClient

from sattrack.app import create_app
from sattrack.core.config import Settings
from sattrack.services.cache import ResponseCache
from sattrack.services.n2yo import N2YOClient
from sattrack.services.satellites import SatelliteService
from sattrack.services.throttle import RequestThrottle

BASE_URL = "https://api.n2yo.com/rest/v1/satellite"
API_PATH = "/rest/v1/satellite"

ABOVE_BODY = {
    "info": {"category": "ISS", "transactionscount": 1, "satcount": 1},
    "above": [
        {
            "satid": 25544,
            "satname": "ISS (ZARYA)",
            "intDesignator": "1998-067A",
            "launchDate": "1998-11-20",
            "satlat": 41.2,
            "satlng": -73.1,
            "satalt": 420.3,
        }
    ],
}

POSITIONS_BODY = {
    "info": {"satname": "SPACE STATION", "satid": 25544, "transactionscount": 5},
    "positions": [
        {
            "satlatitude": -39.90318514,
            "satlongitude": 158.28897924,
            "sataltitude": 417.85,
            "azimuth": 254.31,
            "elevation": -69.09,
            "ra": 44.77078138,
            "dec": -43.03816198,
            "timestamp": 1521354418,
            "eclipsed": False,
        },
        {
            "satlatitude": -39.86180888,
            "satlongitude": 158.35610397,
            "sataltitude": 417.86,
            "azimuth": 254.33,
            "elevation": -69.06,
            "ra": 44.81436748,
            "dec": -43.02575273,
            "timestamp": 1521354419,
            "eclipsed": False,
        },
    ],
}

TLE_BODY = {
    "info": {"satid": 25544, "satname": "SPACE STATION", "transactionscount": 4},
    "tle": (
        "1 25544U 98067A   18077.09047010  .00001878  00000-0  35621-4 0  9999\r\n"
        "2 25544  51.6412 112.8495 0001928 208.4187 178.9720 15.54106440104358"
    ),
}

RATE_LIMIT_BODY = {"error": "Your API Key has exceeded the number of transactions allowed per hour"}

Reply = Tuple[int, Union[dict, list, str]]


class FakeClock:
    """Monotonic clock whose sleep advances time instantly and records the wait."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class StubUpstream:
    """Stand-in for N2YO: replies from a queue, then repeats ``default``."""

    def __init__(self) -> None:
        self.calls: List[httpx.Request] = []
        self.replies: List[Any] = []
        self.default: Reply = (200, ABOVE_BODY)

    def reply(self, status: int, body: Union[dict, list, str]) -> None:
        self.replies.append((status, body))

    def fail(self, exc: Exception) -> None:
        self.replies.append(exc)

    @property
    def paths(self) -> List[str]:
        return [request.url.path[len(API_PATH):] for request in self.calls]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        reply = self.replies.pop(0) if self.replies else self.default
        if isinstance(reply, Exception):
            raise reply
        status, body = reply
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)


@pytest.fixture
def settings() -> Settings:
    return Settings(N2YO_API_KEY="test-key", ENVIRONMENT="development", _env_file=None)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def upstream() -> StubUpstream:
    return StubUpstream()


@pytest.fixture
def n2yo(upstream: StubUpstream) -> N2YOClient:
    return N2YOClient("test-key", base_url=BASE_URL, transport=httpx.MockTransport(upstream.handler))


@pytest.fixture
def cache(clock: FakeClock) -> ResponseCache:
    return ResponseCache(clock=clock)


@pytest.fixture
def throttle(clock: FakeClock) -> RequestThrottle:
    return RequestThrottle(min_interval=3.0, retry_delay=2.0, clock=clock, sleep=clock.sleep)


@pytest.fixture
def service(n2yo, cache, throttle, settings) -> SatelliteService:
    return SatelliteService(n2yo, cache, throttle, settings)


@pytest.fixture
def app(settings, n2yo, cache, throttle):
    return create_app(settings, client=n2yo, cache=cache, throttle=throttle)


@pytest.fixture
def http(app) -> TestClient:
    return TestClient(app)
