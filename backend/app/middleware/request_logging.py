"""Per-request access log.

One line per request with method, full path, final status and latency.
Registered through Flask's request hooks so handlers and responses are
left untouched.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime
from zoneinfo import ZoneInfo

from flask import Flask, Response, g, request

access_logger = logging.getLogger("backend.app.access")

TIMESTAMP_FORMAT = "%d/%m/%Y, %I:%M:%S %p"


def format_access_line(timestamp: str, method: str, path: str, status_code: int, elapsed_ms: int) -> str:
    return f"[{timestamp}] {method} {path} - Status: {status_code} - {elapsed_ms}ms"


def init_request_logging(app: Flask) -> None:
    """Register the access-log hooks on ``app``."""
    tz = ZoneInfo(app.config.get("AUDIT_TIMEZONE") or "UTC")

    @app.before_request
    def _start_request_timer() -> None:
        g.request_started = time.perf_counter()
        g.request_timestamp = datetime.now(tz).strftime(TIMESTAMP_FORMAT)

    @app.after_request
    def _log_request(response: Response) -> Response:
        started = g.pop("request_started", None)
        timestamp = g.pop("request_timestamp", None)
        if started is None:
            # before_request did not run (e.g. the request failed during routing setup)
            started = time.perf_counter()
            timestamp = datetime.now(tz).strftime(TIMESTAMP_FORMAT)
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        access_logger.info(
            format_access_line(timestamp, request.method, request.full_path.rstrip("?"), response.status_code, elapsed_ms),
            extra={
                "method": request.method,
                "path": request.path,
                "status_code": response.status_code,
                "latency_ms": elapsed_ms,
            },
        )
        return response
