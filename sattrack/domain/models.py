"""Shapes of the N2YO payloads and of the proxy's own responses.

Upstream models allow extra fields: they only check that a body carries what
an operation needs, the body itself is passed to clients untouched.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


@dataclass(frozen=True)
class ObserverLocation:
    latitude: float
    longitude: float
    altitude: float = 0.0  # metres above sea level, as N2YO expects


class _UpstreamModel(BaseModel):
    model_config = ConfigDict(extra="allow")


class SatelliteAboveEntry(_UpstreamModel):
    satid: int
    satname: str
    launchDate: Optional[str] = None


class SatellitePosition(_UpstreamModel):
    satlatitude: float
    satlongitude: float
    sataltitude: float
    azimuth: float
    elevation: float
    timestamp: int


class AboveResponse(_UpstreamModel):
    info: Dict[str, Any]
    above: List[SatelliteAboveEntry]


class PositionsResponse(_UpstreamModel):
    info: Dict[str, Any]
    positions: List[SatellitePosition]


class TLEResponse(_UpstreamModel):
    info: Dict[str, Any]
    tle: str = Field(..., min_length=1)

    @field_validator("tle")
    @classmethod
    def validate_two_lines(cls, v: str) -> str:
        if len([ln for ln in v.splitlines() if ln.strip()]) != 2:
            raise ValueError("TLE must contain exactly two lines")
        return v


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None


class HealthError(BaseModel):
    timestamp: datetime
    message: str
    code: Optional[int] = None


class HealthStatus(BaseModel):
    healthy: bool
    lastCheck: Optional[datetime] = None
    recentErrors: List[HealthError] = []
    uptime: float
    memory: Dict[str, int]
