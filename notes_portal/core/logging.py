from __future__ import annotations

import json
import logging
import time
from logging.config import dictConfig

from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("notes_portal.access")


class JsonFormatter(logging.Formatter):
    """Formatter JSON (une ligne par log) pour la prod."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, object] = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["error"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(level: str = "INFO", json_logs: bool = False) -> None:
    formatter = "json" if json_logs else "plain"
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "plain": {"format": "%(asctime)s %(levelname)s [%(name)s] %(message)s"},
                "json": {"()": JsonFormatter},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": formatter,
                },
            },
            "root": {"handlers": ["console"], "level": level.upper()},
        }
    )


class RequestLogMiddleware(BaseHTTPMiddleware):
    # Équivalent du logger HTTP : "GET /content/CSE/3/Maths -> 200 (12ms)"
    async def dispatch(self, request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = (time.perf_counter() - start) * 1000
        logger.info(
            "%s %s -> %s (%dms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed,
        )
        return response
