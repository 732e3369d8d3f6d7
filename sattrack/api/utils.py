from __future__ import annotations

from typing import Optional

from fastapi.responses import JSONResponse

from sattrack.domain.models import ErrorResponse


def error_response(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))
