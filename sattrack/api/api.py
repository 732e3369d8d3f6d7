from fastapi import APIRouter

from sattrack.api.endpoints import health, satellites

api_router = APIRouter()

api_router.include_router(satellites.router, prefix="/satellites", tags=["satellites"])  # /satellites/above, /positions, /tle
api_router.include_router(health.router, prefix="/health", tags=["health"])  # /health, /health/check
