"""Upstream availability monitor.

The check goes straight to the client: it bypasses the cache so it measures
the API itself, and bypasses the throttle so a full queue cannot delay it.
"""
from __future__ import annotations

import asyncio
import logging
import resource
import sys
import time
from collections import deque
from datetime import datetime, timezone
from typing import Any, Deque, Dict, Optional

from sattrack.core.errors import UpstreamError
from sattrack.services.n2yo import N2YOClient

logger = logging.getLogger("sattrack.health")

# New York City, all categories.
CHECK_LOCATION = (40.7128, -74.006, 0)
CHECK_CATEGORY = 0


def _memory_usage() -> Dict[str, int]:
    usage = resource.getrusage(resource.RUSAGE_SELF)
    # ru_maxrss is kilobytes on Linux, bytes on macOS
    max_rss_kb = usage.ru_maxrss // 1024 if sys.platform == "darwin" else usage.ru_maxrss
    return {"maxRssKb": int(max_rss_kb)}


class HealthMonitor:
    def __init__(self, client: N2YOClient, search_radius: int = 45, max_errors: int = 10):
        self.client = client
        self.search_radius = search_radius
        self.healthy = False
        self.last_check: Optional[datetime] = None
        self.errors: Deque[Dict[str, Any]] = deque(maxlen=max_errors)
        self._started = time.monotonic()

    async def check(self) -> bool:
        lat, lng, alt = CHECK_LOCATION
        try:
            await self.client.above(lat, lng, alt, self.search_radius, CHECK_CATEGORY)
        except UpstreamError as exc:
            self._record_failure(str(exc), exc.status_code)
            logger.error("N2YO API health check failed: %s", exc, extra={"code": exc.status_code})
            return False
        except Exception as exc:
            self._record_failure(str(exc) or exc.__class__.__name__, None)
            logger.exception("N2YO API health check failed unexpectedly")
            return False

        self.healthy = True
        self.last_check = datetime.now(timezone.utc)
        self.errors.clear()
        logger.info("N2YO API health check passed")
        return True

    def _record_failure(self, message: str, code: Optional[int]) -> None:
        self.healthy = False
        self.last_check = datetime.now(timezone.utc)
        self.errors.append({"timestamp": self.last_check, "message": message, "code": code})

    def status(self) -> Dict[str, Any]:
        return {
            "healthy": self.healthy,
            "lastCheck": self.last_check,
            "recentErrors": list(self.errors),
            "uptime": round(time.monotonic() - self._started, 3),
            "memory": _memory_usage(),
        }

    async def run_periodic(self, interval: float) -> None:
        """Check every ``interval`` seconds until cancelled."""
        while True:
            await asyncio.sleep(interval)
            healthy = await self.check()
            logger.info("Periodic N2YO API health check", extra={"healthy": healthy})
