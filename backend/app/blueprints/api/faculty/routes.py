"""Faculty API blueprint.

Open to any authenticated admin, whatever the role.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from flask import Blueprint, request

from backend.app.errors import ApiError
from backend.app.middleware.auth_required import login_required
from backend.app.responses import error_response, format_response
from backend.app.services.faculty import faculty_service as svc

faculty_bp = Blueprint("faculty", __name__)
logger = logging.getLogger(__name__)


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@faculty_bp.route("", methods=["POST"], strict_slashes=False)
@login_required
def create_faculty():
    try:
        result = svc.create_faculty(_json_body())
        return format_response(201, "Faculty created successfully", data=result)
    except ApiError as error:
        return error_response(error)
    except Exception as exc:
        logger.exception("Unexpected error creating faculty")
        return format_response(500, "Failed to create faculty", details=str(exc))


@faculty_bp.route("", methods=["GET"], strict_slashes=False)
@login_required
def list_faculty():
    try:
        result = svc.list_faculty()
        return format_response(200, "Faculty list retrieved successfully", data=result)
    except ApiError as error:
        return error_response(error)
    except Exception as exc:
        logger.exception("Unexpected error listing faculty")
        return format_response(500, "Failed to retrieve faculty list", details=str(exc))


@faculty_bp.route("/institute/<name>", methods=["GET"])
@login_required
def list_faculty_by_institute(name: str):
    try:
        result = svc.list_by_institute(name)
        return format_response(200, f"Faculty retrieved for {name.strip()}", data=result)
    except ApiError as error:
        return error_response(error)
    except Exception as exc:
        logger.exception("Unexpected error listing faculty for institute %s", name)
        return format_response(500, "Failed to retrieve faculty", details=str(exc))


@faculty_bp.route("/<faculty_id>", methods=["GET"])
@login_required
def get_faculty(faculty_id: str):
    try:
        result = svc.get_faculty(faculty_id)
        return format_response(200, "Faculty retrieved successfully", data=result)
    except ApiError as error:
        return error_response(error)
    except Exception as exc:
        logger.exception("Unexpected error retrieving faculty %s", faculty_id)
        return format_response(500, "Failed to retrieve faculty", details=str(exc))


@faculty_bp.route("/<faculty_id>", methods=["PUT"])
@login_required
def update_faculty(faculty_id: str):
    try:
        result = svc.update_faculty(faculty_id, _json_body())
        return format_response(200, "Faculty updated successfully", data=result)
    except ApiError as error:
        return error_response(error)
    except Exception as exc:
        logger.exception("Unexpected error updating faculty %s", faculty_id)
        return format_response(500, "Failed to update faculty", details=str(exc))


@faculty_bp.route("/<faculty_id>", methods=["DELETE"])
@login_required
def delete_faculty(faculty_id: str):
    try:
        svc.delete_faculty(faculty_id)
        return format_response(200, "Faculty deleted successfully")
    except ApiError as error:
        return error_response(error)
    except Exception as exc:
        logger.exception("Unexpected error deleting faculty %s", faculty_id)
        return format_response(500, "Failed to delete faculty", details=str(exc))
