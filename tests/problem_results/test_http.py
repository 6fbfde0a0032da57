"""Tests for the FastAPI problem document handlers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.testclient import TestClient
from pydantic import BaseModel, Field

from problem_results.errors.http import (
    problem_details_response,
    register_problem_details_handlers,
    request_info_from_request,
)
from problem_results.failures import (
    ProblemFailure,
    ResourceNotFoundError,
    ResultError,
    TaskCancelledError,
)
from problem_results.logging import JsonFormatter
from problem_results.problem_details import PROBLEM_MEDIA_TYPE, ProblemDocument
from problem_results.settings import load_settings
from problem_results.variants import StructuredError

if TYPE_CHECKING:
    from collections.abc import Iterator


class _User(BaseModel):
    name: str = Field(min_length=2)
    alias: str = Field(max_length=3)


def _locale_from_header(request: Request) -> str | None:
    return request.headers.get("Accept-Language")


@pytest.fixture
def app() -> FastAPI:
    application = FastAPI()
    register_problem_details_handlers(
        application,
        settings=load_settings(),
        locale_provider=_locale_from_header,
    )

    @application.get("/users/{user_id}")
    async def get_user(user_id: str) -> dict[str, str]:
        raise ResourceNotFoundError("User", "id", user_id)

    @application.post("/users")
    async def create_user(user: _User) -> _User:
        return user

    @application.get("/export")
    async def export() -> None:
        raise TaskCancelledError("export")

    @application.get("/structured")
    async def structured() -> None:
        raise ResultError(StructuredError("resource-delete-failed", "in use", {"resource": "User"}))

    @application.get("/broken")
    async def broken() -> None:
        msg = "database unavailable"
        raise RuntimeError(msg)

    @application.get("/base-failure")
    async def base_failure() -> None:
        msg = "boom"
        raise ProblemFailure(msg)

    @application.get("/empty-validation")
    async def empty_validation() -> None:
        raise RequestValidationError([])

    @application.get("/blank")
    async def blank() -> None:
        raise ResourceNotFoundError("", "id", "1")

    @application.get("/echo")
    async def echo(request: Request) -> dict[str, str]:
        info = request_info_from_request(request)
        return {"instance": info.instance, "trace_id": info.trace_id}

    return application


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app, raise_server_exceptions=False)


class TestHandlers:
    """Tests for the registered exception handlers."""

    def test_typed_failure(self, client: TestClient) -> None:
        """Typed failures render with their status and media type."""
        response = client.get("/users/42", headers={"X-Request-ID": "req-1"})
        assert response.status_code == 404
        assert response.headers["content-type"].startswith(PROBLEM_MEDIA_TYPE)
        body = response.json()
        assert body["title"] == "Resource not found!"
        assert body["instance"] == "HTTP/1.1 GET /users/42"
        assert body["extensions"]["traceId"] == "req-1"
        assert body["extensions"]["property-value"] == "42"

    def test_localized(self, client: TestClient) -> None:
        """The locale provider selects the catalog."""
        response = client.get("/users/42", headers={"Accept-Language": "de"})
        assert response.json()["title"] == "Ressource nicht gefunden!"

    def test_unsupported_locale_uses_default(self, client: TestClient) -> None:
        """Unsupported locales fall back to the default locale."""
        response = client.get("/users/42", headers={"Accept-Language": "tlh"})
        assert response.json()["title"] == "Resource not found!"

    def test_generated_trace_id(self, client: TestClient) -> None:
        """A trace id is generated when the header is missing."""
        body = client.get("/users/42").json()
        assert body["extensions"]["traceId"]

    def test_request_validation(self, client: TestClient) -> None:
        """Request validation errors become grouped validation problems."""
        response = client.post("/users", json={"name": "A", "alias": "toolong"})
        assert response.status_code == 400
        body = response.json()
        assert body["extensions"]["error-code"] == "validation-failed"
        assert [group["propertyName"] for group in body["extensions"]["errors"]] == [
            "name",
            "alias",
        ]
        assert body["detail"] == "Unfortunately, '2' validation errors have occurred."

    def test_task_cancelled(self, client: TestClient) -> None:
        """Cancelled tasks respond with 499."""
        assert client.get("/export").status_code == 499

    def test_structured_result_error(self, client: TestClient) -> None:
        """ResultError renders its structured error."""
        response = client.get("/structured")
        assert response.status_code == 404
        assert response.json()["extensions"]["resource"] == "User"

    def test_unexpected_error(self, client: TestClient) -> None:
        """Other exceptions render as unexpected errors."""
        response = client.get("/broken")
        assert response.status_code == 500
        body = response.json()
        assert body["extensions"]["error-code"] == "unexpected-error"
        assert body["extensions"]["error-message"] == "database unavailable"

    def test_invalid_parameters_render_unexpected(self, client: TestClient) -> None:
        """A failure with blank message parameters still yields a document."""
        response = client.get("/blank")
        assert response.status_code == 500
        assert response.json()["extensions"]["error-code"] == "unexpected-error"

    def test_base_failure_renders_document(self, client: TestClient) -> None:
        """A raised ProblemFailure yields an unexpected-error document."""
        response = client.get("/base-failure")
        assert response.status_code == 500
        assert response.headers["content-type"].startswith(PROBLEM_MEDIA_TYPE)
        body = response.json()
        assert body["extensions"]["error-code"] == "unexpected-error"
        assert body["extensions"]["error-message"] == "boom"

    def test_empty_request_validation_is_bad_request(self, client: TestClient) -> None:
        """A request validation error listing no errors is a bad request."""
        response = client.get("/empty-validation")
        assert response.status_code == 400
        body = response.json()
        assert body["extensions"]["error-code"] == "bad-request"
        assert body["detail"] == "Unfortunately, 'GET' '/empty-validation' request is invalid."

    def test_request_info(self, client: TestClient) -> None:
        """request_info_from_request reads protocol, path and trace header."""
        body = client.get("/echo", headers={"X-Request-ID": "abc"}).json()
        assert body == {"instance": "HTTP/1.1 GET /echo", "trace_id": "abc"}


class TestProblemDetailsResponse:
    """Tests for problem_details_response."""

    def test_response(self) -> None:
        """The response carries the document status and payload."""
        document = ProblemDocument(
            type="https://problems.problem-results.dev/forbidden",
            title="Access forbidden!",
            detail="No.",
            status=403,
            instance="HTTP/1.1 GET /",
            extensions={"traceId": "t", "error-code": "forbidden", "error-message": "no"},
        )
        response = problem_details_response(document)
        assert response.status_code == 403
        assert response.media_type == PROBLEM_MEDIA_TYPE
        assert b'"traceId":"t"' in response.body


@pytest.fixture
def root_logger() -> Iterator[logging.Logger]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)


class TestConfigureLogging:
    """Tests for the configure_logging option."""

    def test_uses_settings_log_level(self, root_logger: logging.Logger) -> None:
        """The root logger gets JSON output at the configured level."""
        register_problem_details_handlers(
            FastAPI(), settings=load_settings(log_level="debug"), configure_logging=True
        )
        assert root_logger.level == logging.DEBUG
        assert any(isinstance(handler.formatter, JsonFormatter) for handler in root_logger.handlers)

    def test_off_by_default(self, root_logger: logging.Logger) -> None:
        """Without configure_logging the root logger is left alone."""
        before = list(root_logger.handlers)
        register_problem_details_handlers(FastAPI(), settings=load_settings(log_level="ERROR"))
        assert root_logger.handlers == before
