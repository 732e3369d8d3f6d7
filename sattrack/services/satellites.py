"""Satellite lookups: validation, caching and throttled upstream calls."""
from __future__ import annotations

import logging
import math
from typing import Any, Awaitable, Callable, Dict, Optional

from sattrack.core.config import Settings
from sattrack.core.errors import UpstreamError, ValidationError
from sattrack.domain.models import ObserverLocation
from sattrack.services.cache import ResponseCache, make_key
from sattrack.services.n2yo import N2YOClient
from sattrack.services.throttle import RequestThrottle

logger = logging.getLogger(__name__)

MAX_POSITION_SECONDS = 300  # N2YO upper bound for /positions


def _is_absent(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_float(value: Any, field: str, label: str) -> float:
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {label} value", field=field)
    if math.isnan(parsed) or math.isinf(parsed):
        raise ValidationError(f"Invalid {label} value", field=field)
    return parsed


def _parse_int(value: Any, field: str, message: str) -> int:
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        raise ValidationError(message, field=field)
    if not parsed.is_integer():
        raise ValidationError(message, field=field)
    return int(parsed)


def parse_observer(lat: Any, lng: Any, alt: Any = 0) -> ObserverLocation:
    """Validate raw observer coordinates; altitude defaults to sea level."""
    latitude = _parse_float(lat, "lat", "latitude")
    if not -90 <= latitude <= 90:
        raise ValidationError("Invalid latitude value", field="lat")
    longitude = _parse_float(lng, "lng", "longitude")
    if not -180 <= longitude <= 180:
        raise ValidationError("Invalid longitude value", field="lng")
    altitude = 0.0 if _is_absent(alt) else _parse_float(alt, "alt", "altitude")
    if altitude < 0:
        raise ValidationError("Invalid altitude value", field="alt")
    return ObserverLocation(latitude=latitude, longitude=longitude, altitude=altitude)


def parse_norad_id(value: Any) -> int:
    norad_id = _parse_int(value, "satId", "Invalid satellite id")
    if norad_id <= 0:
        raise ValidationError("Invalid satellite id", field="satId")
    return norad_id


class SatelliteService:
    """Composes the cache, the throttle and the N2YO client per operation."""

    def __init__(
        self,
        client: N2YOClient,
        cache: ResponseCache,
        throttle: RequestThrottle,
        settings: Settings,
    ):
        self.client = client
        self.cache = cache
        self.throttle = throttle
        self.search_radius = settings.SEARCH_RADIUS
        self.ttl_above = settings.CACHE_TTL_ABOVE
        self.ttl_positions = settings.CACHE_TTL_POSITIONS
        self.ttl_tle = settings.CACHE_TTL_TLE

    async def _cached(
        self,
        operation: str,
        key: str,
        ttl: float,
        fetch: Callable[[], Awaitable[Dict[str, Any]]],
        shape: Optional[Callable[[Dict[str, Any]], Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return cached

        try:
            body = await self.throttle.schedule(fetch)
        except UpstreamError as exc:
            exc.operation = operation
            logger.error("%s", exc)
            raise

        data = shape(body) if shape else body
        self.cache.set(key, data, ttl)
        return data

    async def satellites_above(self, lat: Any, lng: Any, alt: Any = 0, category: Any = 0) -> Dict[str, Any]:
        """Objects currently within the search radius of the observer's zenith.

        ``category`` is an N2YO category id (0 = all) forwarded upstream, which
        does the filtering; the returned collection is passed through as is.
        """
        observer = parse_observer(lat, lng, alt)
        cat = 0 if _is_absent(category) else _parse_int(category, "cat", "Invalid category value")
        if cat < 0:
            raise ValidationError("Invalid category value", field="cat")

        key = make_key("above", observer.latitude, observer.longitude, observer.altitude, cat)

        def fetch() -> Awaitable[Dict[str, Any]]:
            return self.client.above(
                observer.latitude, observer.longitude, observer.altitude, self.search_radius, cat
            )

        return await self._cached("satellites above", key, self.ttl_above, fetch)

    async def satellite_positions(
        self, norad_id: Any, lat: Any, lng: Any, alt: Any = 0, seconds: Any = 2
    ) -> Dict[str, Any]:
        """Future positions of one satellite as seen from the observer."""
        if _is_absent(norad_id) or _is_absent(lat) or _is_absent(lng):
            raise ValidationError("Missing required parameters: satId, lat, lng")
        sat_id = parse_norad_id(norad_id)
        observer = parse_observer(lat, lng, alt)
        count = 2 if _is_absent(seconds) else _parse_int(seconds, "seconds", "Invalid seconds value")
        if not 1 <= count <= MAX_POSITION_SECONDS:
            raise ValidationError("Invalid seconds value", field="seconds")

        key = make_key("positions", sat_id, observer.latitude, observer.longitude, observer.altitude, count)

        def fetch() -> Awaitable[Dict[str, Any]]:
            return self.client.positions(sat_id, observer.latitude, observer.longitude, observer.altitude, count)

        def shape(body: Dict[str, Any]) -> Dict[str, Any]:
            return {"info": body["info"], "positions": body["positions"]}

        return await self._cached("satellite positions", key, self.ttl_positions, fetch, shape)

    async def satellite_tle(self, norad_id: Any) -> Dict[str, Any]:
        if _is_absent(norad_id):
            raise ValidationError("Missing required parameter: satId", field="satId")
        sat_id = parse_norad_id(norad_id)

        def fetch() -> Awaitable[Dict[str, Any]]:
            return self.client.tle(sat_id)

        return await self._cached("satellite TLE", make_key("tle", sat_id), self.ttl_tle, fetch)
