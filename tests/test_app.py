from __future__ import annotations

import pytest
from pymongo.errors import DuplicateKeyError

from backend.app import create_app
from backend.app.config import TestingConfig
from backend.app.db import ConnectionState
from backend.app.repositories import duplicate_key_field, to_object_id


def test_health_reports_connected_database(client) -> None:
    for path in ("/", "/api/health"):
        response = client.get(path)
        assert response.status_code == 200
        body = response.get_json()
        assert body["status"] == "success"
        assert body["data"]["database"] == "connected"


def test_health_reports_failed_connection(fake_admins, fake_faculty) -> None:
    state = ConnectionState()
    state.mark_failed("Database connection failed: timed out")
    app = create_app(TestingConfig, connection_state=state)

    response = app.test_client().get("/")

    assert response.status_code == 500
    body = response.get_json()
    assert body["message"] == "Database Connection Failed"
    assert body["details"] == "Database connection failed: timed out"


def test_testing_app_skips_startup_connection() -> None:
    app = create_app(TestingConfig)
    response = app.test_client().get("/api/health")
    assert response.status_code == 500
    assert response.get_json()["details"] == "MongoDB is not connected"


def test_missing_jwt_secret_refuses_to_start() -> None:
    class NoSecretConfig(TestingConfig):
        TESTING = False
        JWT_SECRET_KEY = None

    with pytest.raises(RuntimeError):
        create_app(NoSecretConfig)


def test_unknown_route_uses_envelope(client) -> None:
    response = client.get("/api/nowhere")
    assert response.status_code == 404
    body = response.get_json()
    assert body["statusCode"] == 404
    assert body["status"] == "error"
    assert body["message"] == "Not Found"


def test_cors_headers(client) -> None:
    response = client.get("/api/health")
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert "Authorization" in response.headers["Access-Control-Allow-Headers"]


def test_duplicate_key_field_from_key_pattern() -> None:
    error = DuplicateKeyError("E11000", 11000, {"keyPattern": {"email": 1}})
    assert duplicate_key_field(error) == "email"


def test_duplicate_key_field_from_message() -> None:
    error = DuplicateKeyError("E11000 duplicate key error collection: db.faculty index: uq_email dup key: { email: \"a\" }", 11000, {})
    assert duplicate_key_field(error) == "email"


@pytest.mark.parametrize("value,valid", [("507f1f77bcf86cd799439011", True), ("123", False), (None, False), (42, False)])
def test_to_object_id(value, valid) -> None:
    assert (to_object_id(value) is not None) is valid
