"""Tests for standardized error handling."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from psycopg import errors as pg_errors
from pydantic import BaseModel, Field


class TestAPIErrors:
    """Test custom API error classes."""

    def test_not_found_error_defaults(self):
        from datevote.errors import NotFoundError

        error = NotFoundError()
        assert error.status_code == 404
        assert error.error == "not_found"
        assert error.detail == "Resource not found"

    def test_event_not_found_error(self):
        from datevote.errors import EventNotFoundError, NotFoundError

        error = EventNotFoundError(event_id=3)
        assert isinstance(error, NotFoundError)
        assert error.detail == "Event not found"
        assert error.error_code == "EVENT_NOT_FOUND"
        assert error.context == {"event_id": 3}

    def test_validation_error(self):
        from datevote.errors import ValidationError

        error = ValidationError(detail="Score must be between 1 and 5", score=9)
        assert error.status_code == 422
        assert error.error == "validation_error"
        assert error.context == {"score": 9}

    @pytest.mark.parametrize(
        "name,status,error_type",
        [
            ("BadRequestError", 400, "bad_request"),
            ("UnauthorizedError", 401, "unauthorized"),
            ("ConflictError", 409, "conflict"),
            ("ServiceUnavailableError", 503, "service_unavailable"),
            ("DatabaseError", 500, "database_error"),
        ],
    )
    def test_status_and_type(self, name, status, error_type):
        from datevote import errors

        error = getattr(errors, name)()
        assert error.status_code == status
        assert error.error == error_type


class TestErrorResponse:

    def test_error_response_minimal(self):
        from datevote.errors import ErrorResponse

        data = ErrorResponse(error="internal_error").model_dump(exclude_none=True)
        assert data == {"error": "internal_error"}

    def test_api_error_to_response(self):
        from datevote.errors import NotFoundError

        response = NotFoundError(detail="Not found", event_id=7).to_response()

        assert response.error == "not_found"
        assert response.detail == "Not found"
        assert response.context == {"event_id": 7}


class _Body(BaseModel):
    score: int = Field(ge=1, le=5)


def _app():
    from datevote.errors import EventNotFoundError, register_exception_handlers

    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/missing")
    async def missing():
        raise EventNotFoundError(event_id=1)

    @app.get("/storage")
    async def storage():
        raise pg_errors.UndefinedTable("relation \"events\" does not exist")

    @app.post("/scores")
    async def scores(body: _Body):
        return body

    return TestClient(app, raise_server_exceptions=False)


class TestExceptionHandlers:

    def test_api_error_handler(self):
        response = _app().get("/missing")

        assert response.status_code == 404
        assert response.json() == {
            "error": "not_found",
            "detail": "Event not found",
            "error_code": "EVENT_NOT_FOUND",
            "context": {"event_id": 1},
        }

    def test_storage_error_hides_details(self):
        response = _app().get("/storage")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "database_error"
        assert "relation" not in body["detail"]

    def test_request_validation(self):
        response = _app().post("/scores", json={"score": 9})

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["detail"].startswith("score:")
        assert body["context"]["errors"][0]["loc"] == ["body", "score"]

    def test_unknown_route_uses_standard_shape(self):
        response = _app().get("/nowhere")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


class TestStatusToErrorType:

    def test_common_status_codes(self):
        from datevote.errors import _status_to_error_type

        assert _status_to_error_type(404) == "not_found"
        assert _status_to_error_type(422) == "validation_error"
        assert _status_to_error_type(503) == "service_unavailable"

    def test_unknown_status_code(self):
        from datevote.errors import _status_to_error_type

        assert _status_to_error_type(418) == "error"
