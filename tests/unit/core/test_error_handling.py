"""
Tests for error handling middleware and exception handlers.

Covers message sanitization, the failure envelope and the status mapping of
domain, validation and database errors.
"""

import json

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError, OperationalError

from core.middleware.error_handling import (
    AuthenticationError,
    ConflictError,
    ErrorHandlingMiddleware,
    ForbiddenError,
    InvalidStateError,
    JobBoardError,
    NotFoundError,
    get_safe_error_details,
    sanitize_error_message,
    setup_error_handlers,
)


class TestSensitiveDataSanitization:
    """Test sensitive data sanitization."""

    @pytest.mark.parametrize("sensitive_input,expected_redacted", [
        # Passwords
        ('password="secret123"', True),
        ('user_password: "P@ssw0rd!"', True),
        # Tokens
        ('token="Bearer abc123xyz"', True),
        ('access_token:jwt.token.here', True),
        # API keys and secrets
        ('api_key="sk_live_12345"', True),
        ('api-key="secret-key-123"', True),
        ('client_secret:abc123', True),
        # Authorization
        ('authorization: Bearer token123', True),
        # bcrypt hashes
        ('hash $2b$12$' + 'a' * 53, True),
        # Credit cards
        ('4111111111111111', True),
        # Safe values (should not be redacted)
        ('username="john_doe"', False),
        ('message="Operation successful"', False),
        ('count=12345', False),
        ('Not authorized, token failed', False),
        ('Password must contain at least one number', False),
    ])
    def test_sanitize_sensitive_patterns(self, sensitive_input, expected_redacted):
        sanitized = sanitize_error_message(sensitive_input)
        assert ("[REDACTED]" in sanitized) is expected_redacted

    def test_multiple_sensitive_fields_in_one_message(self):
        message = 'Error: password="secret" and token="abc123" and api_key="xyz789"'
        sanitized = sanitize_error_message(message)

        assert "abc123" not in sanitized
        assert "xyz789" not in sanitized
        assert sanitized.count("[REDACTED]") == 3

    def test_case_insensitive_pattern_matching(self):
        for case in ('PASSWORD="test"', 'Password="test"', 'API_KEY="test"'):
            assert "[REDACTED]" in sanitize_error_message(case)

    def test_non_string_input(self):
        assert sanitize_error_message(404) == "404"

    def test_empty_string(self):
        assert sanitize_error_message("") == ""


class TestSafeErrorDetails:
    """Test safe error detail extraction."""

    def test_basic_exception_details(self):
        details = get_safe_error_details(ValueError("Test error message"))

        assert details == {"type": "ValueError", "message": "Test error message"}

    def test_debug_includes_traceback(self):
        details = get_safe_error_details(ValueError("Test error"), include_details=True)
        assert isinstance(details["traceback"], str)

    def test_message_is_sanitized(self):
        details = get_safe_error_details(ValueError("Error with password=secret123"))

        assert "secret123" not in details["message"]
        assert "[REDACTED]" in details["message"]


class TestDomainErrors:
    """Test the domain error taxonomy."""

    @pytest.mark.parametrize("error_class,status_code", [
        (NotFoundError, 404),
        (InvalidStateError, 400),
        (ForbiddenError, 403),
        (ConflictError, 400),
        (AuthenticationError, 401),
    ])
    def test_status_codes(self, error_class, status_code):
        error = error_class("boom")
        assert isinstance(error, JobBoardError)
        assert error.status_code == status_code
        assert error.message == "boom"

    def test_default_messages(self):
        assert ForbiddenError().message == "Not authorized"
        assert AuthenticationError().message == "Not authorized, token failed"


class Payload(BaseModel):
    title: str = Field(..., max_length=5)
    openings: int = Field(1, ge=1)


@pytest.fixture
def app():
    """FastAPI app with the error handlers and middleware installed."""
    app = FastAPI()
    setup_error_handlers(app)
    app.add_middleware(ErrorHandlingMiddleware, debug=False)

    @app.get("/success")
    async def success():
        return {"success": True}

    @app.get("/not-found")
    async def not_found():
        raise NotFoundError("Job not found")

    @app.get("/forbidden")
    async def forbidden():
        raise ForbiddenError("Not authorized to update this job")

    @app.get("/conflict")
    async def conflict():
        raise ConflictError("You have already applied for this job")

    @app.get("/http-error")
    async def http_error():
        raise HTTPException(status_code=418, detail="Teapot with token=abc123")

    @app.post("/validate")
    async def validate(body: Payload):
        return body

    @app.get("/integrity-error")
    async def integrity_error():
        raise IntegrityError("duplicate key", None, Exception("unique"))

    @app.get("/operational-error")
    async def operational_error():
        raise OperationalError("connection lost", None, Exception("down"))

    @app.get("/unexpected")
    async def unexpected():
        raise RuntimeError("Unexpected error with api_key=secret")

    return app


@pytest.fixture
def client(app):
    return TestClient(app)


class TestErrorEnvelope:
    """Test the failure envelope produced for each error kind."""

    def test_successful_request(self, client):
        response = client.get("/success")
        assert response.status_code == 200
        assert response.json() == {"success": True}

    @pytest.mark.parametrize("path,status_code,message", [
        ("/not-found", 404, "Job not found"),
        ("/forbidden", 403, "Not authorized to update this job"),
        ("/conflict", 400, "You have already applied for this job"),
    ])
    def test_domain_errors(self, client, path, status_code, message):
        response = client.get(path)

        assert response.status_code == status_code
        assert response.json() == {"success": False, "message": message}

    def test_http_exception_is_sanitized(self, client):
        response = client.get("/http-error")

        assert response.status_code == 418
        assert response.json()["success"] is False
        assert "abc123" not in json.dumps(response.json())

    def test_unknown_route(self, client):
        response = client.get("/nope")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Not Found"}

    def test_validation_error(self, client):
        response = client.post("/validate", json={"title": "Too long title", "openings": 0})

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["message"] == "Validation failed"
        fields = {error["field"] for error in data["errors"]}
        assert fields == {"title", "openings"}
        assert all({"field", "message", "type"} <= set(error) for error in data["errors"])

    def test_missing_body_field(self, client):
        response = client.post("/validate", json={})

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "title"

    def test_integrity_error(self, client):
        response = client.get("/integrity-error")

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_database_error(self, client):
        response = client.get("/operational-error")

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Server error"}

    def test_unexpected_error(self, client):
        response = client.get("/unexpected")

        assert response.status_code == 500
        data = response.json()
        assert data == {"success": False, "message": "Server error"}
        assert "secret" not in json.dumps(data)

    def test_debug_mode_includes_details(self):
        app = FastAPI()
        app.add_middleware(ErrorHandlingMiddleware, debug=True)

        @app.get("/error")
        async def error():
            raise ValueError("Test error with password=hunter2")

        response = TestClient(app).get("/error")
        data = response.json()

        assert response.status_code == 500
        assert data["errors"][0]["type"] == "ValueError"
        assert "hunter2" not in json.dumps(data)
