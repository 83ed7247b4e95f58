"""Faculty records service layer."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from flask import current_app
from pymongo.errors import DuplicateKeyError, PyMongoError

from backend.app.errors import BadRequest, Conflict, Internal, NotFound, ValidationFailed
from backend.app.repositories import duplicate_key_field, faculty_repo, to_object_id
from backend.app.services import validation as v

logger = logging.getLogger(__name__)

FACULTY_FIELDS = ("name", "subject", "email", "institute", "department")


def _rules() -> Dict[str, List[v.Rule]]:
    institutes = current_app.config["FACULTY_INSTITUTES"]
    return {
        "name": [v.required("Name is required")],
        "subject": [v.required("Subject is required")],
        "email": [v.email()],
        "institute": [
            v.required("Institute is required"),
            v.one_of(institutes, f"Institute must be one of: {', '.join(institutes)}"),
        ],
        "department": [v.required("Department is required")],
    }


def create_faculty(payload: Dict[str, Any]) -> Dict[str, Any]:
    errors = v.validate(payload, _rules())
    if errors:
        raise ValidationFailed(errors)

    doc = {field: v.clean_text(payload[field]) for field in FACULTY_FIELDS}
    try:
        new_id = faculty_repo.create_faculty(doc)
    except DuplicateKeyError as exc:
        raise Conflict(duplicate_key_field(exc)) from exc
    except PyMongoError as exc:
        logger.error("Failed to create faculty: %s", exc)
        raise Internal("Failed to create faculty", details=str(exc)) from exc

    created = faculty_repo.find_by_id(new_id) or {**doc, "_id": new_id}
    logger.info("Faculty created", extra={"faculty_id": str(new_id), "institute": doc["institute"]})
    return serialize_faculty(created)


def list_faculty() -> Dict[str, Any]:
    members = faculty_repo.list_all()
    if not members:
        raise NotFound("No faculty members found")
    return {"faculty": [serialize_faculty(doc) for doc in members], "count": len(members)}


def list_by_institute(institute: str) -> Dict[str, Any]:
    institute = (institute or "").strip()
    if not institute:
        raise ValidationFailed([{"field": "name", "message": "Institute name is required"}])
    members = faculty_repo.find_by_institute(institute)
    if not members:
        raise NotFound(f"No faculty found for institute: {institute}")
    return {"faculty": [serialize_faculty(doc) for doc in members], "count": len(members)}


def get_faculty(faculty_id: str) -> Dict[str, Any]:
    _require_object_id(faculty_id)
    member = faculty_repo.find_by_id(faculty_id)
    if not member:
        raise NotFound("Faculty not found")
    return serialize_faculty(member)


def update_faculty(faculty_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    _require_object_id(faculty_id)

    errors = v.validate(payload, _rules(), partial=True)
    if errors:
        raise ValidationFailed(errors)

    set_fields = {field: v.clean_text(payload[field]) for field in FACULTY_FIELDS if field in payload}
    if not set_fields:
        raise BadRequest("No updatable fields provided")
    set_fields["updatedAt"] = datetime.now(timezone.utc)

    try:
        updated = faculty_repo.update_faculty(faculty_id, set_fields)
    except DuplicateKeyError as exc:
        raise Conflict(duplicate_key_field(exc)) from exc
    except PyMongoError as exc:
        logger.error("Failed to update faculty %s: %s", faculty_id, exc)
        raise Internal("Failed to update faculty", details=str(exc)) from exc

    if not updated:
        raise NotFound("Faculty not found")
    return serialize_faculty(updated)


def delete_faculty(faculty_id: str) -> None:
    _require_object_id(faculty_id)
    try:
        deleted = faculty_repo.delete_by_id(faculty_id)
    except PyMongoError as exc:
        logger.error("Failed to delete faculty %s: %s", faculty_id, exc)
        raise Internal("Failed to delete faculty", details=str(exc)) from exc
    if not deleted:
        raise NotFound("Faculty not found")
    logger.info("Faculty deleted", extra={"faculty_id": faculty_id})


def serialize_faculty(doc: Dict[str, Any]) -> Dict[str, Any]:
    data: Dict[str, Any] = {"id": str(doc.get("_id")) if doc.get("_id") is not None else None}
    for field in FACULTY_FIELDS:
        data[field] = doc.get(field)
    data["createdAt"] = _serialize_datetime(doc.get("createdAt"))
    data["updatedAt"] = _serialize_datetime(doc.get("updatedAt"))
    return data


def _serialize_datetime(value: Any) -> Optional[str]:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _require_object_id(faculty_id: str) -> None:
    if to_object_id(faculty_id) is None:
        raise BadRequest("Invalid faculty ID")
