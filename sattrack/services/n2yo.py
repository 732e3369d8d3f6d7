"""N2YO REST API client."""
from __future__ import annotations

import logging
import time
from decimal import Decimal
from typing import Any, Dict, Optional, Type

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as ModelValidationError

from sattrack.core.errors import (
    ConfigurationError,
    UpstreamHttpError,
    UpstreamMalformed,
    UpstreamRateLimited,
    ValidationError,
)
from sattrack.domain.models import AboveResponse, PositionsResponse, TLEResponse

logger = logging.getLogger(__name__)

N2YO_BASE_URL = "https://api.n2yo.com/rest/v1/satellite"
RATE_LIMIT_MARKER = "exceeded the number of transactions"


def _is_rate_limit(message: Optional[str]) -> bool:
    return bool(message) and RATE_LIMIT_MARKER in str(message)


def _format_param(value: Any) -> str:
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        # repr() switches to exponent notation below 1e-4
        return format(Decimal(repr(value)), "f")
    return str(value)


def _require_numeric(endpoint: str, **params: Any) -> None:
    for name, value in params.items():
        try:
            float(value)
        except (TypeError, ValueError):
            raise ValidationError(f"All parameters for /{endpoint} endpoint must be numeric", field=name)


class N2YOClient:
    """Client for the N2YO satellite API.

    One ``httpx.AsyncClient`` is shared by all calls. The API key travels as the
    ``apiKey`` query parameter and is never logged.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = N2YO_BASE_URL,
        timeout: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not api_key:
            raise ConfigurationError("N2YO API key is not configured (set N2YO_API_KEY)")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._http = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def aclose(self) -> None:
        await self._http.aclose()

    def build_path(self, endpoint: str, *params: Any) -> str:
        parts = [endpoint.strip("/")] + [_format_param(p) for p in params]
        return "/" + "/".join(parts)

    async def fetch(self, endpoint: str, *params: Any) -> Dict[str, Any]:
        """GET ``/{endpoint}/{params...}`` and return the decoded JSON object."""
        path = self.build_path(endpoint, *params)
        url = f"{self.base_url}{path}"
        started = time.perf_counter()

        try:
            response = await self._http.get(url, params={"apiKey": self.api_key})
        except httpx.RequestError as exc:
            logger.error(
                "N2YO API request error: %s (%s)",
                path,
                exc.__class__.__name__,
                extra={"endpoint": path, "error": str(exc)},
            )
            raise UpstreamHttpError(f"N2YO API request error: {exc.__class__.__name__}", endpoint=path) from exc

        elapsed_ms = (time.perf_counter() - started) * 1000.0
        log_extra = {"endpoint": path, "status": response.status_code, "elapsed_ms": round(elapsed_ms, 1)}

        try:
            body = response.json()
        except ValueError:
            body = None

        error = body.get("error") if isinstance(body, dict) else None
        if _is_rate_limit(error):
            logger.warning("N2YO API rate limit hit: %s", path, extra={**log_extra, "error": error})
            raise UpstreamRateLimited(f"N2YO API error: {error}", status_code=response.status_code, endpoint=path)

        if not response.is_success:
            logger.error(
                "N2YO API HTTP error: %s -> %s",
                path,
                response.status_code,
                extra={**log_extra, "error": error},
            )
            detail = error or response.reason_phrase
            raise UpstreamHttpError(
                f"N2YO API HTTP error: {response.status_code} {detail}",
                status_code=response.status_code,
                endpoint=path,
            )

        if body is None:
            logger.error("N2YO API returned a non-JSON body: %s", path, extra=log_extra)
            raise UpstreamMalformed("Invalid JSON in N2YO API response", status_code=response.status_code, endpoint=path)

        if not isinstance(body, dict):
            raise UpstreamMalformed("Empty response from N2YO API", status_code=response.status_code, endpoint=path)

        if error:
            logger.error("N2YO API response error: %s", path, extra={**log_extra, "error": error})
            raise UpstreamHttpError(f"N2YO API error: {error}", status_code=response.status_code, endpoint=path)

        logger.info("N2YO API response: %s -> %s in %.0fms", path, response.status_code, elapsed_ms, extra=log_extra)
        return body

    async def _fetch_validated(self, model: Type[BaseModel], endpoint: str, *params: Any) -> Dict[str, Any]:
        body = await self.fetch(endpoint, *params)
        try:
            model.model_validate(body)
        except ModelValidationError as exc:
            fields = ", ".join(sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]}))
            raise UpstreamMalformed(
                f"Missing or invalid {fields or 'fields'} in N2YO API response",
                endpoint=self.build_path(endpoint, *params),
            ) from exc
        return body

    async def above(self, lat: float, lng: float, alt: float, radius: int, category: int) -> Dict[str, Any]:
        """Objects within ``radius`` degrees of the observer's zenith."""
        _require_numeric("above", lat=lat, lng=lng, alt=alt, radius=radius, category=category)
        return await self._fetch_validated(AboveResponse, "above", lat, lng, alt, radius, category)

    async def positions(self, norad_id: int, lat: float, lng: float, alt: float, seconds: int) -> Dict[str, Any]:
        """Future ground-track samples for one satellite, one per second."""
        return await self._fetch_validated(PositionsResponse, "positions", norad_id, lat, lng, alt, seconds)

    async def tle(self, norad_id: int) -> Dict[str, Any]:
        return await self._fetch_validated(TLEResponse, "tle", norad_id)
