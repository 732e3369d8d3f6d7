from fastapi import APIRouter, Depends, Response, status

from sattrack.api.deps import get_health_monitor
from sattrack.domain.models import HealthStatus
from sattrack.services.health import HealthMonitor

router = APIRouter()


@router.get("", response_model=HealthStatus)
async def health(monitor: HealthMonitor = Depends(get_health_monitor)):
    """Last recorded upstream status; does not contact N2YO."""
    return monitor.status()


@router.get("/check", response_model=HealthStatus)
async def health_check(response: Response, monitor: HealthMonitor = Depends(get_health_monitor)):
    """Query N2YO now; 503 when the check fails."""
    healthy = await monitor.check()
    if not healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return monitor.status()
