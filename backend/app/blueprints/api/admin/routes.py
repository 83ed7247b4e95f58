"""Admin account API blueprint.

Login is public; every other endpoint is gated by role. All persistence and
validation lives in the service layer to keep routes thin.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from flask import Blueprint, current_app, request

from backend.app.errors import ApiError
from backend.app.extensions import limiter
from backend.app.middleware.auth_required import roles_required
from backend.app.responses import error_response, format_response
from backend.app.services.admin import admin_service as svc
from backend.app.services.auth.principal import current_principal
from backend.app.services.auth.roles import Role

admin_bp = Blueprint("admin", __name__)
logger = logging.getLogger(__name__)


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _login_rate_limit() -> str:
    return current_app.config["LOGIN_RATE_LIMIT"]


@admin_bp.route("", methods=["POST"], strict_slashes=False)
@roles_required(Role.SUPERADMIN)
def create_admin():
    """Create a new admin account (superadmin only)."""
    try:
        result = svc.create_admin(_json_body(), initiator_id=current_principal().id)
        return format_response(201, "Admin created successfully", data=result)
    except ApiError as error:
        return error_response(error)
    except Exception as exc:
        logger.exception("Unexpected error creating admin")
        return format_response(500, "Failed to create admin", details=str(exc))


@admin_bp.route("/login", methods=["POST"])
@limiter.limit(_login_rate_limit)
def login():
    """Exchange email and password for a token."""
    try:
        result = svc.login(_json_body())
        return format_response(200, "Login successful", data=result)
    except ApiError as error:
        return error_response(error)
    except Exception as exc:
        logger.exception("Unexpected error during login")
        return format_response(500, "Login failed", details=str(exc))


@admin_bp.route("", methods=["GET"], strict_slashes=False)
@roles_required(Role.ADMIN, Role.SUPERADMIN)
def list_admins():
    try:
        result = svc.list_admins(initiator_id=current_principal().id)
        return format_response(200, "Admin list retrieved successfully", data=result)
    except ApiError as error:
        return error_response(error)
    except Exception as exc:
        logger.exception("Unexpected error listing admins")
        return format_response(500, "Failed to retrieve admin list", details=str(exc))


@admin_bp.route("/<admin_id>", methods=["GET"])
@roles_required(Role.ADMIN, Role.SUPERADMIN)
def get_admin(admin_id: str):
    try:
        result = svc.get_admin(admin_id)
        return format_response(200, "Admin retrieved successfully", data=result)
    except ApiError as error:
        return error_response(error)
    except Exception as exc:
        logger.exception("Unexpected error retrieving admin %s", admin_id)
        return format_response(500, "Failed to retrieve admin", details=str(exc))


@admin_bp.route("/<admin_id>", methods=["PUT"])
@roles_required(Role.SUPERADMIN)
def update_admin(admin_id: str):
    """Partially update an admin (superadmin only)."""
    try:
        result = svc.update_admin(admin_id, _json_body(), initiator_id=current_principal().id)
        return format_response(200, "Admin updated successfully", data=result)
    except ApiError as error:
        return error_response(error)
    except Exception as exc:
        logger.exception("Unexpected error updating admin %s", admin_id)
        return format_response(500, "Failed to update admin", details=str(exc))


@admin_bp.route("/<admin_id>", methods=["DELETE"])
@roles_required(Role.SUPERADMIN)
def delete_admin(admin_id: str):
    """Delete an admin; self-deletion and removing the last superadmin are refused."""
    try:
        svc.delete_admin(admin_id, current_principal())
        return format_response(200, "Admin deleted successfully")
    except ApiError as error:
        return error_response(error)
    except Exception as exc:
        logger.exception("Unexpected error deleting admin %s", admin_id)
        return format_response(500, "Failed to delete admin", details=str(exc))
