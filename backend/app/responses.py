"""JSON response envelope shared by every endpoint."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Tuple

from flask import Response, jsonify

from backend.app.errors import ApiError


def envelope(
    status_code: int,
    message: str,
    data: Any = None,
    details: Any = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "statusCode": status_code,
        "status": "success" if status_code < 400 else "error",
        "message": message,
    }
    if data is not None:
        body["data"] = data
    if details is not None:
        body["details"] = details
    body["timestamp"] = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    return body


def format_response(
    status_code: int,
    message: str,
    data: Any = None,
    details: Any = None,
) -> Tuple[Response, int]:
    """Build a ``(response, status)`` pair in the standard envelope."""
    return jsonify(envelope(status_code, message, data=data, details=details)), status_code


def error_response(error: ApiError) -> Tuple[Response, int]:
    return format_response(error.status, error.message, details=error.details)
