import logging
import os
import sys
import time
import uuid
from typing import Callable, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware


DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Configure root logging and align the uvicorn loggers.

    - Level from the argument, else LOG_LEVEL (default INFO)
    - Format from the argument, else LOG_FORMAT
    """
    level_name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    log_level = getattr(logging, level_name, logging.INFO)

    # If logging is already configured (e.g., by uvicorn), don't add duplicate handlers
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt or os.getenv("LOG_FORMAT") or DEFAULT_FORMAT))
        root.addHandler(handler)
    root.setLevel(log_level)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(log_level)


class RequestContextLogMiddleware(BaseHTTPMiddleware):
    """Per-request log lines:
    - request_id from X-Request-ID, or a fresh uuid4
    - start and end lines with status code and latency
    - request_id echoed in the x-request-id response header

    Bodies are never logged; submissions carry personal data.
    """

    def __init__(self, app):
        super().__init__(app)
        self.logger = logging.getLogger("forms.http")

    async def dispatch(self, request: Request, call_next: Callable):
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        start = time.perf_counter()
        method = request.method
        path = request.url.path

        self.logger.info("request start %s %s rid=%s", method, path, request_id)
        try:
            response = await call_next(request)
        except Exception:
            self.logger.exception(
                "request error %s %s time_ms=%s rid=%s",
                method, path, int((time.perf_counter() - start) * 1000), request_id,
            )
            raise

        response.headers["x-request-id"] = request_id
        self.logger.info(
            "request end %s %s status=%s time_ms=%s rid=%s",
            method, path, response.status_code, int((time.perf_counter() - start) * 1000), request_id,
        )
        return response
