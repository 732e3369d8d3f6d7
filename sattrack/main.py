"""
SatTrack proxy - main entry point

Run with ``uvicorn sattrack.main:app`` or ``python -m sattrack.main``.
Importing this module fails fast when N2YO_API_KEY is not set.
"""
import uvicorn

from sattrack.app import create_app
from sattrack.core.config import get_settings
from sattrack.core.logging import setup_logging

settings = get_settings()
setup_logging(settings)

app = create_app(settings)

if __name__ == "__main__":
    uvicorn.run(
        "sattrack.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        log_level=settings.LOG_LEVEL.lower(),
        log_config=None,
    )
