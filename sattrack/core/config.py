"""Configuration settings for the SatTrack proxy."""
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    PROJECT_NAME: str = "SatTrack Proxy"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    API_PREFIX: str = ""

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 5000
    RELOAD: bool = False

    # CORS
    FRONTEND_URL: str = "http://localhost:3000"

    # N2YO upstream
    N2YO_BASE_URL: str = "https://api.n2yo.com/rest/v1/satellite"
    N2YO_API_KEY: Optional[str] = None
    N2YO_TIMEOUT: float = 20.0
    SEARCH_RADIUS: int = 45  # degrees from zenith, applied to every /above query

    # Cache TTLs (seconds)
    CACHE_TTL_ABOVE: int = 300
    CACHE_TTL_POSITIONS: int = 120
    CACHE_TTL_TLE: int = 300

    # Throttle (seconds)
    THROTTLE_MIN_INTERVAL: float = 3.0
    THROTTLE_RETRY_DELAY: float = 2.0

    # Health monitor
    HEALTH_CHECK_INTERVAL: float = 300.0
    HEALTH_MAX_ERRORS: int = 10

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    class Config:
        case_sensitive = True
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() in ("development", "dev")


@lru_cache
def get_settings() -> Settings:
    """Get application settings, read once per process."""
    return Settings()
