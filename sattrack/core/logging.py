"""
Logging configuration for the SatTrack proxy.

This module provides a centralized logging configuration with support for:
- Structured JSON logging in production
- Human-readable console output in development
- File-based logging with rotation (combined, error and health logs)
- Request IDs for request tracing
"""
import json
import logging
import logging.config
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Request, Response

from sattrack.core.config import Settings, get_settings

_request_id: ContextVar[str] = ContextVar("request_id", default="system")

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime", "request_id"}


class RequestIdFilter(logging.Filter):
    """Add request_id to log records from the current request context."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()  # type: ignore
        return True


class JsonFormatter(logging.Formatter):
    """
    Format log records as JSON for structured logging.

    In production, logs are emitted as JSON for easier parsing by log aggregation
    systems. In development, a more human-readable format is used.
    """

    def __init__(self, *args: Any, is_prod: bool = False, **kwargs: Any) -> None:
        self.is_prod = is_prod
        super().__init__(*args, **kwargs)

    def format(self, record: logging.LogRecord) -> str:
        if not self.is_prod:
            return super().format(record)

        log_record: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", "system"),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and key not in log_record:
                log_record[key] = value

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record, ensure_ascii=False, default=str)


def setup_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure logging for the application.

    Sets up console and file handlers with appropriate formatters
    based on the environment (development/production).
    """
    settings = settings or get_settings()

    logs_dir = Path(settings.LOG_DIR)
    logs_dir.mkdir(parents=True, exist_ok=True)

    file_formatter = "file" if settings.is_development else "json"

    log_config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "request_id": {"()": RequestIdFilter},
        },
        "formatters": {
            "json": {
                "()": JsonFormatter,
                "is_prod": not settings.is_development,
                "fmt": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "console": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "file": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": "DEBUG",
                "formatter": "console",
                "filters": ["request_id"],
                "stream": "ext://sys.stdout",
            },
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "level": "INFO",
                "formatter": file_formatter,
                "filters": ["request_id"],
                "filename": str(logs_dir / "combined.log"),
                "maxBytes": 10 * 1024 * 1024,  # 10MB
                "backupCount": 5,
                "encoding": "utf-8",
            },
            "error_file": {
                "class": "logging.handlers.RotatingFileHandler",
                "level": "WARNING",
                "formatter": file_formatter,
                "filters": ["request_id"],
                "filename": str(logs_dir / "error.log"),
                "maxBytes": 10 * 1024 * 1024,
                "backupCount": 5,
                "encoding": "utf-8",
            },
            "health_file": {
                "class": "logging.handlers.RotatingFileHandler",
                "level": "INFO",
                "formatter": file_formatter,
                "filters": ["request_id"],
                "filename": str(logs_dir / "health.log"),
                "maxBytes": 10 * 1024 * 1024,
                "backupCount": 5,
                "encoding": "utf-8",
            },
        },
        "loggers": {
            "": {  # root logger
                "handlers": ["console", "file", "error_file"],
                "level": settings.LOG_LEVEL,
            },
            "sattrack.health": {
                "handlers": ["health_file"],
                "level": settings.LOG_LEVEL,
                "propagate": True,
            },
            "uvicorn": {
                "handlers": ["console", "file"],
                "level": "INFO",
                "propagate": False,
            },
            "uvicorn.error": {
                "handlers": ["console", "error_file"],
                "level": "WARNING",
                "propagate": False,
            },
            "httpx": {
                "handlers": ["console", "file"],
                "level": "WARNING",
                "propagate": False,
            },
        },
    }

    logging.config.dictConfig(log_config)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Args:
        name: The name of the logger. If None, returns the root logger.

    Returns:
        A configured logger instance.
    """
    return logging.getLogger(name)


def bind_request_id(request: Request) -> str:
    """Assign a request id to the request and the logging context."""
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = request_id
    _request_id.set(request_id)
    return request_id


def log_request(request: Request, response: Optional[Response] = None, error: Optional[Exception] = None) -> None:
    """
    Log an HTTP request with its response or error.

    Args:
        request: The incoming Request object.
        response: The Response object (if successful).
        error: Any exception that occurred during request processing.
    """
    logger = get_logger("sattrack.http")

    client_host = request.client.host if request.client else "unknown"
    details = {
        "method": request.method,
        "path": request.url.path,
        "query": str(request.query_params),
        "client": client_host,
    }

    if error:
        logger.error(
            "Request failed: %s %s",
            request.method,
            request.url.path,
            extra={**details, "status_code": getattr(error, "status_code", 500), "error": str(error)},
        )
    elif response:
        logger.info(
            "Request processed: %s %s -> %s",
            request.method,
            request.url.path,
            response.status_code,
            extra={**details, "status_code": response.status_code},
        )
    else:
        logger.info("Incoming request: %s %s", request.method, request.url.path, extra=details)
