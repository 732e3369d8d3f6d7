"""Dependencies resolving the per-app singletons built by ``create_app``."""
from fastapi import Request

from sattrack.core.config import Settings
from sattrack.services.health import HealthMonitor
from sattrack.services.satellites import SatelliteService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_satellite_service(request: Request) -> SatelliteService:
    return request.app.state.satellite_service


def get_health_monitor(request: Request) -> HealthMonitor:
    return request.app.state.health_monitor
