import asyncio

import pytest
from fastapi.testclient import TestClient

from sattrack.app import create_app
from sattrack.services.health import HealthMonitor


def test_health(http, upstream):
    r = http.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["healthy"] is False
    assert body["lastCheck"] is None
    assert body["recentErrors"] == []
    assert body["uptime"] >= 0
    assert "maxRssKb" in body["memory"]
    assert upstream.calls == []


def test_health_check_queries_upstream(http, upstream, cache, clock):
    r = http.get("/health/check")
    assert r.status_code == 200
    assert r.json()["healthy"] is True
    assert r.json()["lastCheck"] is not None
    assert upstream.paths == ["/above/40.7128/-74.006/0/45/0"]
    # the check bypasses both the cache and the throttle
    assert len(cache) == 0
    assert clock.sleeps == []


def test_health_check_failure_is_503(http, upstream):
    upstream.reply(500, "Internal Server Error")
    r = http.get("/health/check")
    assert r.status_code == 503
    body = r.json()
    assert body["healthy"] is False
    assert len(body["recentErrors"]) == 1
    assert body["recentErrors"][0]["code"] == 500


def test_health_check_recovers_and_clears_errors(http, upstream):
    upstream.reply(500, "Internal Server Error")
    assert http.get("/health/check").status_code == 503
    r = http.get("/health/check")
    assert r.status_code == 200
    assert r.json()["recentErrors"] == []


def test_recent_errors_are_bounded(n2yo, upstream):
    upstream.default = (502, "Bad Gateway")
    monitor = HealthMonitor(n2yo, max_errors=2)

    async def scenario():
        for _ in range(3):
            assert await monitor.check() is False

    asyncio.run(scenario())
    assert len(monitor.status()["recentErrors"]) == 2


def test_periodic_checks_until_cancelled(n2yo, upstream):
    monitor = HealthMonitor(n2yo)

    async def scenario():
        task = asyncio.create_task(monitor.run_periodic(0))
        while len(upstream.calls) < 2:
            await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())
    assert monitor.healthy is True


def test_startup_runs_initial_check(app, upstream):
    with TestClient(app) as client:
        assert upstream.paths == ["/above/40.7128/-74.006/0/45/0"]
        assert client.get("/health").json()["healthy"] is True


def test_unexpected_client_exception_is_503(http, upstream):
    upstream.fail(RuntimeError("connection pool exploded"))
    r = http.get("/health/check")
    assert r.status_code == 503
    body = r.json()
    assert body["healthy"] is False
    assert body["lastCheck"] is not None
    assert body["recentErrors"][0]["message"] == "connection pool exploded"
    assert body["recentErrors"][0]["code"] is None


def test_startup_survives_unexpected_check_exception(app, upstream):
    upstream.fail(RuntimeError("boom"))
    with TestClient(app) as client:
        body = client.get("/health").json()
        assert body["healthy"] is False
        assert len(body["recentErrors"]) == 1


def test_periodic_loop_continues_after_unexpected_exception(n2yo, upstream):
    upstream.fail(RuntimeError("boom"))
    monitor = HealthMonitor(n2yo)

    async def scenario():
        task = asyncio.create_task(monitor.run_periodic(0))
        while len(upstream.calls) < 2:
            await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())
    assert monitor.healthy is True


def test_app_uses_supplied_monitor(settings, n2yo, cache, throttle, upstream):
    monitor = HealthMonitor(n2yo, search_radius=10, max_errors=1)
    app = create_app(settings, client=n2yo, cache=cache, throttle=throttle, monitor=monitor)
    assert app.state.health_monitor is monitor

    r = TestClient(app).get("/health/check")
    assert r.status_code == 200
    assert upstream.paths == ["/above/40.7128/-74.006/0/10/0"]
