from __future__ import annotations

from typing import Any, Awaitable, Optional

from fastapi import APIRouter, Depends, Query

from sattrack.api.deps import get_app_settings, get_satellite_service
from sattrack.api.utils import error_response
from sattrack.core.config import Settings
from sattrack.core.errors import UpstreamError, UpstreamMalformed, ValidationError
from sattrack.services.satellites import SatelliteService

router = APIRouter()

UPSTREAM_ERROR = "Error fetching satellite data from upstream API"


async def _respond(
    call: Awaitable[Any],
    settings: Settings,
    no_data_error: Optional[str] = None,
) -> Any:
    """Await a service call and map classified errors to responses.

    With ``no_data_error`` set, a malformed upstream body means "no data" (404);
    otherwise it is a server error (500).
    """
    try:
        return await call
    except ValidationError as exc:
        return error_response(400, exc.message)
    except UpstreamMalformed as exc:
        if no_data_error:
            return error_response(404, no_data_error)
        return error_response(500, "Invalid data received from upstream API", str(exc) if settings.is_development else None)
    except UpstreamError as exc:
        return error_response(502, UPSTREAM_ERROR, str(exc))


@router.get("/above")
async def satellites_above(
    lat: Optional[str] = Query(None, description="Observer latitude in degrees"),
    lng: Optional[str] = Query(None, description="Observer longitude in degrees"),
    alt: Optional[str] = Query(None, description="Observer altitude in metres"),
    cat: Optional[str] = Query(None, description="N2YO category id, 0 for all"),
    service: SatelliteService = Depends(get_satellite_service),
    settings: Settings = Depends(get_app_settings),
):
    """Satellites currently above the observer."""
    return await _respond(
        service.satellites_above(lat, lng, alt, cat),
        settings,
        no_data_error="No satellite data available for the given parameters",
    )


@router.get("/positions")
async def satellite_positions(
    satId: Optional[str] = Query(None, description="NORAD ID of the satellite"),
    lat: Optional[str] = Query(None, description="Observer latitude in degrees"),
    lng: Optional[str] = Query(None, description="Observer longitude in degrees"),
    alt: Optional[str] = Query(None, description="Observer altitude in metres"),
    seconds: Optional[str] = Query(None, description="Number of one-second samples"),
    service: SatelliteService = Depends(get_satellite_service),
    settings: Settings = Depends(get_app_settings),
):
    return await _respond(
        service.satellite_positions(satId, lat, lng, alt, seconds),
        settings,
        no_data_error="No position data available for the given satellite",
    )


@router.get("/tle")
async def satellite_tle(
    satId: Optional[str] = Query(None, description="NORAD ID of the satellite"),
    service: SatelliteService = Depends(get_satellite_service),
    settings: Settings = Depends(get_app_settings),
):
    return await _respond(service.satellite_tle(satId), settings)
