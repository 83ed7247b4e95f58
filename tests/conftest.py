"""Shared fixtures: app, client and in-memory repositories.

Routes and services are exercised against fake repositories patched into
the modules that use them, so no MongoDB server is needed.
"""

from __future__ import annotations

import copy
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest
from bson import ObjectId
from flask import Flask
from pymongo.errors import DuplicateKeyError

from backend.app import create_app
from backend.app.config import TestingConfig
from backend.app.db import ConnectionState
from backend.app.services.admin import admin_service
from backend.app.services.auth import principal as principal_module
from backend.app.services.auth.passwords import hash_password
from backend.app.services.auth.roles import Role
from backend.app.services.auth.tokens import issue_token
from backend.app.services.faculty import faculty_service


def _duplicate(field: str, value: Any) -> DuplicateKeyError:
    return DuplicateKeyError(
        f"E11000 duplicate key error index: uq_{field} dup key: {{ {field}: {value!r} }}",
        11000,
        {"keyPattern": {field: 1}, "keyValue": {field: value}},
    )


class InMemoryCollection:
    unique_fields = ("email",)

    def __init__(self) -> None:
        self.docs: Dict[ObjectId, Dict[str, Any]] = {}

    def _check_unique(self, doc: Dict[str, Any], exclude: Optional[ObjectId] = None) -> None:
        for field in self.unique_fields:
            for oid, other in self.docs.items():
                if oid != exclude and field in doc and other.get(field) == doc[field]:
                    raise _duplicate(field, doc[field])

    def _oid(self, doc_id: Any) -> Optional[ObjectId]:
        if isinstance(doc_id, ObjectId):
            return doc_id
        if isinstance(doc_id, str) and ObjectId.is_valid(doc_id):
            return ObjectId(doc_id)
        return None

    def insert(self, doc: Dict[str, Any]) -> ObjectId:
        doc = copy.deepcopy(doc)
        self._check_unique(doc)
        now = datetime.now(timezone.utc)
        doc.setdefault("createdAt", now)
        doc.setdefault("updatedAt", now)
        oid = ObjectId()
        doc["_id"] = oid
        self.docs[oid] = doc
        return oid

    def find_by_id(self, doc_id: Any) -> Optional[Dict[str, Any]]:
        oid = self._oid(doc_id)
        doc = self.docs.get(oid) if oid else None
        return copy.deepcopy(doc) if doc else None

    def update(self, doc_id: Any, set_fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        oid = self._oid(doc_id)
        if oid not in self.docs:
            return None
        if "email" in set_fields:
            set_fields["email"] = set_fields["email"].lower()
        self._check_unique(set_fields, exclude=oid)
        self.docs[oid].update(copy.deepcopy(set_fields))
        return copy.deepcopy(self.docs[oid])

    def delete_by_id(self, doc_id: Any) -> Optional[Dict[str, Any]]:
        oid = self._oid(doc_id)
        if oid is None:
            return None
        return self.docs.pop(oid, None)

    def all(self) -> List[Dict[str, Any]]:
        return [copy.deepcopy(doc) for doc in self.docs.values()]


class FakeAdminsRepository(InMemoryCollection):
    def _public(self, doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if doc is None:
            return None
        doc.pop("password", None)
        return doc

    def find_public_by_id(self, admin_id: Any) -> Optional[Dict[str, Any]]:
        return self._public(self.find_by_id(admin_id))

    def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        for doc in self.docs.values():
            if doc.get("email") == email.lower():
                return copy.deepcopy(doc)
        return None

    def list_all(self) -> List[Dict[str, Any]]:
        return [self._public(doc) for doc in self.all()]

    def count_by_role(self, role: str) -> int:
        return sum(1 for doc in self.docs.values() if doc.get("role") == role)

    def create_admin(self, admin_data: Dict[str, Any]) -> ObjectId:
        admin_data["email"] = admin_data["email"].lower()
        return self.insert(admin_data)

    def update_admin(self, admin_id: Any, set_fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self._public(self.update(admin_id, set_fields))


class FakeFacultyRepository(InMemoryCollection):
    def list_all(self) -> List[Dict[str, Any]]:
        return self.all()

    def find_by_institute(self, institute: str) -> List[Dict[str, Any]]:
        return [doc for doc in self.all() if doc.get("institute") == institute]

    def create_faculty(self, faculty_data: Dict[str, Any]) -> ObjectId:
        faculty_data["email"] = faculty_data["email"].lower()
        return self.insert(faculty_data)

    def update_faculty(self, faculty_id: Any, set_fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self.update(faculty_id, set_fields)


@pytest.fixture(name="fake_admins")
def fixture_fake_admins(monkeypatch) -> FakeAdminsRepository:
    repo = FakeAdminsRepository()
    monkeypatch.setattr(admin_service, "admins_repo", repo)
    monkeypatch.setattr(principal_module, "admins_repo", repo)
    return repo


@pytest.fixture(name="fake_faculty")
def fixture_fake_faculty(monkeypatch) -> FakeFacultyRepository:
    repo = FakeFacultyRepository()
    monkeypatch.setattr(faculty_service, "faculty_repo", repo)
    return repo


@pytest.fixture(name="connection_state")
def fixture_connection_state() -> ConnectionState:
    state = ConnectionState()
    state.mark_connected()
    return state


@pytest.fixture(name="app")
def fixture_app(fake_admins, fake_faculty, connection_state) -> Flask:
    return create_app(TestingConfig, connection_state=connection_state)


@pytest.fixture(name="client")
def fixture_client(app: Flask):
    return app.test_client()


@pytest.fixture(name="make_admin")
def fixture_make_admin(fake_admins):
    """Insert an admin and return its id."""

    def make(role: Role = Role.ADMIN, *, email: Optional[str] = None, password: str = "secret123", name: str = "Test Admin") -> str:
        oid = fake_admins.create_admin({
            "name": name,
            "email": email or f"{role.value}-{ObjectId()}@example.com",
            "password": hash_password(password),
            "role": role.value,
        })
        return str(oid)

    return make


@pytest.fixture(name="auth_header")
def fixture_auth_header(app: Flask):
    def header(admin_id: str, role: Role) -> Dict[str, str]:
        with app.app_context():
            token = issue_token(admin_id, role)
        return {"Authorization": f"Bearer {token}"}

    return header


@pytest.fixture(name="login_as")
def fixture_login_as(make_admin, auth_header):
    """Create an admin with ``role`` and return ``(admin_id, headers)``."""

    def login(role: Role = Role.SUPERADMIN):
        admin_id = make_admin(role)
        return admin_id, auth_header(admin_id, role)

    return login
