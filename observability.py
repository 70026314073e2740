"""Structured logging: JSON formatter, setup, and a per-request access log."""

import json
import logging
import time
from datetime import datetime, timezone

from fastapi import Request

access_logger = logging.getLogger("contest_hub.access")

_EXTRA_FIELDS = (
    "method", "path", "status_code", "duration_ms",
    "error_code", "email", "contest_id",
)


class JSONFormatter(logging.Formatter):
    """Format logs as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


HANDLER_NAME = "contest_hub"


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Configure the root logger. Repeated calls only reset the level."""
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if any(h.get_name() == HANDLER_NAME for h in logging.root.handlers):
        return
    handler = logging.StreamHandler()
    handler.set_name(HANDLER_NAME)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    logging.root.addHandler(handler)


def _log_access(request: Request, status_code: int, start: float) -> None:
    duration_ms = round((time.perf_counter() - start) * 1000, 2)
    access_logger.info(
        f"{request.method} {request.url.path} {status_code} {duration_ms}ms",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": status_code,
            "duration_ms": duration_ms,
        },
    )


async def log_requests(request: Request, call_next):
    """HTTP middleware writing one access line per request."""
    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        _log_access(request, 500, start)
        raise
    _log_access(request, response.status_code, start)
    return response
