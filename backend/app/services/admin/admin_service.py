"""Admin account service layer.

Wraps repository access for the admin endpoints, centralizes validation,
provides serialization helpers, and emits audit-friendly logs for every
mutation.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pymongo.errors import DuplicateKeyError, PyMongoError

from backend.app.errors import (
    BadRequest,
    Conflict,
    Forbidden,
    Internal,
    InvalidCredentials,
    NotFound,
    ValidationFailed,
)
from backend.app.repositories import admins_repo, duplicate_key_field, to_object_id
from backend.app.services import validation as v
from backend.app.services.admin.deletion_policy import can_change_role, can_delete
from backend.app.services.auth.passwords import hash_password, verify_password
from backend.app.services.auth.principal import Principal
from backend.app.services.auth.roles import Role
from backend.app.services.auth.tokens import issue_token

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("backend.app.audit.admins")

UPDATABLE_FIELDS = ("name", "email", "password", "role")
# bcrypt only hashes the first 72 bytes
MAX_PASSWORD_BYTES = 72

CREATE_RULES = {
    "name": [v.required("Name is required")],
    "email": [v.email()],
    "password": [
        v.min_length(6, "Password must be at least 6 characters"),
        v.max_bytes(MAX_PASSWORD_BYTES, "Password must be at most 72 bytes"),
    ],
    "role": [v.required("Role is required"), v.one_of(Role.values(), "Invalid role")],
}

UPDATE_RULES = {
    "name": [v.required("Name cannot be empty")],
    "email": [v.email()],
    "password": [
        v.min_length(6, "Password must be at least 6 characters"),
        v.max_bytes(MAX_PASSWORD_BYTES, "Password must be at most 72 bytes"),
    ],
    "role": [v.one_of(Role.values(), "Invalid role")],
}

LOGIN_RULES = {
    "email": [v.email()],
    "password": [v.required("Password is required")],
}


def create_admin(payload: Dict[str, Any], *, initiator_id: Optional[str] = None) -> Dict[str, Any]:
    """Create an admin account; the password is stored as a bcrypt hash."""
    errors = v.validate(payload, CREATE_RULES)
    if errors:
        raise ValidationFailed(errors)

    doc = {
        "name": v.clean_text(payload["name"]),
        "email": v.clean_text(payload["email"]),
        "password": hash_password(payload["password"]),
        "role": Role.parse(v.clean_text(payload["role"])).value,
    }

    try:
        new_id = admins_repo.create_admin(doc)
    except DuplicateKeyError as exc:
        raise Conflict(duplicate_key_field(exc)) from exc
    except PyMongoError as exc:
        logger.error("Failed to create admin: %s", exc)
        raise Internal("Failed to create admin", details=str(exc)) from exc

    created = admins_repo.find_public_by_id(new_id) or {**doc, "_id": new_id}
    result = serialize_admin(created)

    _log_action("create_admin", initiator_id, target_id=result["id"], details={"role": result["role"]})
    return result


def login(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Check credentials and issue a token for the admin."""
    errors = v.validate(payload, LOGIN_RULES)
    if errors:
        raise ValidationFailed(errors)

    email = v.clean_text(payload["email"])
    admin = admins_repo.find_by_email(email)
    if not admin or not verify_password(payload["password"], admin.get("password") or ""):
        logger.info("Failed login attempt", extra={"email": email.lower()})
        raise InvalidCredentials()

    admin_id = str(admin["_id"])
    try:
        role = Role.parse(admin.get("role"))
    except ValueError:
        logger.warning("Login refused for admin with unknown role", extra={"admin_id": admin_id, "role": admin.get("role")})
        raise InvalidCredentials() from None
    token = issue_token(admin_id, role)

    _log_action("login", admin_id)
    return {
        "token": token,
        "admin": {
            "id": admin_id,
            "name": admin.get("name"),
            "email": admin.get("email"),
            "role": role.value,
        },
    }


def list_admins(*, initiator_id: Optional[str] = None) -> Dict[str, Any]:
    admins = admins_repo.list_all()
    if not admins:
        raise NotFound("No admins found")
    _log_action("list_admins", initiator_id, details={"count": len(admins)})
    return {
        "admins": [serialize_admin(doc) for doc in admins],
        "count": len(admins),
    }


def get_admin(admin_id: str) -> Dict[str, Any]:
    _require_object_id(admin_id)
    admin = admins_repo.find_public_by_id(admin_id)
    if not admin:
        raise NotFound("Admin not found")
    return serialize_admin(admin)


def update_admin(admin_id: str, payload: Dict[str, Any], *, initiator_id: Optional[str] = None) -> Dict[str, Any]:
    """Apply a partial update of name, email, password and role."""
    _require_object_id(admin_id)

    errors = v.validate(payload, UPDATE_RULES, partial=True)
    if errors:
        raise ValidationFailed(errors)

    set_fields: Dict[str, Any] = {
        field: v.clean_text(payload[field]) for field in UPDATABLE_FIELDS if field in payload
    }
    if not set_fields:
        raise BadRequest("No updatable fields provided")

    existing = admins_repo.find_public_by_id(admin_id)
    if not existing:
        raise NotFound("Admin not found")

    if "role" in set_fields:
        new_role = Role.parse(set_fields["role"])
        superadmins = admins_repo.count_by_role(Role.SUPERADMIN.value)
        if not can_change_role(existing, new_role, superadmins):
            raise Forbidden("Cannot demote the last superadmin")
        set_fields["role"] = new_role.value

    if "password" in set_fields:
        set_fields["password"] = hash_password(payload["password"])

    set_fields["updatedAt"] = datetime.now(timezone.utc)

    try:
        updated = admins_repo.update_admin(admin_id, set_fields)
    except DuplicateKeyError as exc:
        raise Conflict(duplicate_key_field(exc)) from exc
    except PyMongoError as exc:
        logger.error("Failed to update admin %s: %s", admin_id, exc)
        raise Internal("Failed to update admin", details=str(exc)) from exc

    if not updated:
        raise NotFound("Admin not found")

    changed = sorted(field for field in set_fields if field != "updatedAt")
    _log_action("update_admin", initiator_id, target_id=str(updated["_id"]), details={"fields": changed})
    return serialize_admin(updated)


def delete_admin(admin_id: str, requester: Principal) -> None:
    """Permanently remove an admin, subject to the safe-deletion rules.

    The target and the superadmin count are read, then the delete is
    issued with no lock in between (see deletion_policy).
    """
    _require_object_id(admin_id)

    target = admins_repo.find_public_by_id(admin_id)
    superadmins = admins_repo.count_by_role(Role.SUPERADMIN.value)
    if not target:
        raise NotFound("Admin not found")

    decision = can_delete(requester, target, superadmins)
    if not decision.allowed:
        logger.warning(
            "Admin deletion denied",
            extra={"admin_id": requester.id, "target_admin_id": admin_id, "reason": decision.reason.value},
        )
        raise Forbidden(decision.message)

    try:
        deleted = admins_repo.delete_by_id(admin_id)
    except PyMongoError as exc:
        logger.error("Failed to delete admin %s: %s", admin_id, exc)
        raise Internal("Failed to delete admin", details=str(exc)) from exc

    if not deleted:
        raise NotFound("Admin not found")

    audit_logger.info(
        'Admin "%s" (%s) deleted admin "%s" (%s)',
        requester.name,
        requester.id,
        deleted.get("name"),
        deleted["_id"],
        extra={
            "action": "delete_admin",
            "admin_id": requester.id,
            "target_admin_id": str(deleted["_id"]),
            "deleted_at": datetime.now(timezone.utc).isoformat(),
        },
    )


def seed_superadmin(email: str, password: str, name: str = "Super Admin") -> bool:
    """Create the bootstrap superadmin unless an admin with ``email`` exists.

    Returns:
        bool: True when a new superadmin was inserted
    """
    if admins_repo.find_by_email(email):
        logger.info("Superadmin %s already exists", email)
        return False

    try:
        admins_repo.create_admin({
            "name": name,
            "email": email,
            "password": hash_password(password),
            "role": Role.SUPERADMIN.value,
        })
    except DuplicateKeyError:
        logger.info("Superadmin %s created concurrently", email)
        return False

    logger.info("Superadmin %s created successfully", email)
    return True


def serialize_admin(admin: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": str(admin.get("_id")) if admin.get("_id") is not None else None,
        "name": admin.get("name"),
        "email": admin.get("email"),
        "role": admin.get("role"),
        "createdAt": _serialize_datetime(admin.get("createdAt")),
        "updatedAt": _serialize_datetime(admin.get("updatedAt")),
    }


def _serialize_datetime(value: Any) -> Optional[str]:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _require_object_id(admin_id: str) -> None:
    if to_object_id(admin_id) is None:
        raise BadRequest("Invalid admin ID")


def _log_action(
    action: str,
    initiator_id: Optional[str],
    *,
    target_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    audit_logger.info(
        "admin_action",
        extra={
            "action": action,
            "admin_id": initiator_id,
            "target_admin_id": target_id,
            "details": details or {},
        },
    )
