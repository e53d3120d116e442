"""Tests for global exception handlers.

Validates that all exception types are handled consistently with
proper HTTP status codes, error format, and no information leakage.
"""

import asyncio
import json

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from truthmeter.core.errors import (
    AppError,
    AuthenticationAppError,
    ConflictAppError,
    NotFoundAppError,
    RateLimitAppError,
    StorageAppError,
    ValidationAppError,
)
from truthmeter.core.exception_handlers import (
    general_exception_handler,
    setup_exception_handlers,
    status_code_for,
)


@pytest.fixture
def app_with_handlers() -> FastAPI:
    """Create FastAPI app with exception handlers registered."""
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    return TestClient(app_with_handlers, raise_server_exceptions=False)


class TestAppErrorHandler:
    """Test handler for AppError and subclasses."""

    @pytest.mark.parametrize(
        "error, expected_status",
        [
            (ValidationAppError(code="invalid_category", message="Unknown category."), 400),
            (AuthenticationAppError(code="invalid_api_key", message="Invalid or missing API key"), 403),
            (NotFoundAppError(code="secret_not_found", message="Secret not found."), 404),
            (ConflictAppError(code="nickname_taken", message="Nickname already taken."), 409),
            (RateLimitAppError(code="post_rate_limited", message="Slow down."), 429),
            (StorageAppError(code="storage_error", message="Try again later."), 500),
        ],
    )
    def test_status_codes(
        self,
        client: TestClient,
        app_with_handlers: FastAPI,
        error: AppError,
        expected_status: int,
    ):
        @app_with_handlers.get("/boom")
        async def boom():
            raise error

        response = client.get("/boom")

        assert response.status_code == expected_status
        data = response.json()
        assert data["error"]["code"] == error.code
        assert data["error"]["message"] == error.message
        assert "request_id" in data["error"]

    def test_base_app_error_defaults_to_400(self):
        assert status_code_for(AppError(code="x", message="y")) == 400

    def test_validation_error_includes_details(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/too-long")
        async def too_long():
            raise ValidationAppError(
                code="content_length_out_of_range",
                message="Secret text must be between 2 and 2000 characters.",
                details={"min_value": 2, "max_value": 2000, "actual_value": 2001},
            )

        response = client.get("/too-long")

        assert response.status_code == 400
        assert response.json()["error"]["details"] == {
            "min_value": 2,
            "max_value": 2000,
            "actual_value": 2001,
        }

    def test_details_omitted_when_absent(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/plain")
        async def plain():
            raise NotFoundAppError(code="no_secrets", message="No secrets have been shared yet.")

        assert "details" not in client.get("/plain").json()["error"]

    def test_rate_limit_sets_retry_after_header(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/throttled")
        async def throttled():
            raise RateLimitAppError(
                code="post_rate_limited",
                message="You are posting too fast, please wait a moment.",
                details={"retry_after": 9.2},
            )

        response = client.get("/throttled")

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "10"

    def test_storage_error_hides_details(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/storage")
        async def storage():
            raise StorageAppError(
                code="storage_error",
                message="The operation could not be completed.",
                details={"context": {"sql": "UPDATE secrets SET ..."}},
            )

        response = client.get("/storage")

        assert response.status_code == 500
        assert "UPDATE secrets" not in response.text


class TestGeneralExceptionHandler:
    """Test fallback handler for unexpected exceptions."""

    def test_unexpected_exception_returns_generic_500(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/crash")
        async def crash():
            raise RuntimeError("database password is hunter2")

        response = client.get("/crash")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "internal_server_error"
        assert "hunter2" not in response.text

    def test_general_exception_handler_logic(self):
        class _Request:
            class url:
                path = "/v1/secrets"

            method = "POST"

        response = asyncio.run(general_exception_handler(_Request(), ValueError("boom")))
        body = json.loads(response.body)

        assert response.status_code == 500
        assert body["error"]["code"] == "internal_server_error"
        assert "boom" not in response.body.decode()


def test_setup_exception_handlers_registers_handlers(app_with_handlers: FastAPI):
    assert AppError in app_with_handlers.exception_handlers
    assert Exception in app_with_handlers.exception_handlers
