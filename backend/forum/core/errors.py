"""Problem Details (RFC 7807) rendering for every error the API can produce.

Bodies are ``application/problem+json`` with ``type``, ``title``, ``status``,
``detail``, ``instance``, a stable ``code``, the ``request_id`` and, for
validation failures, ``details.errors``.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, has_request_context, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from forum.core.logger import ensure_request_id

log = logging.getLogger(__name__)

# Fallback ``code`` for framework-raised HTTP errors.
STATUS_CODES: dict[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    412: "precondition_failed",
    413: "payload_too_large",
    415: "unsupported_media_type",
    422: "validation_error",
    428: "precondition_required",
    429: "too_many_requests",
    500: "internal_server_error",
    503: "service_unavailable",
}


def code_for_status(status: int) -> str:
    return STATUS_CODES.get(status, "error")


def build_problem(
    status: int,
    detail: str,
    *,
    code: str | None = None,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    problem: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": detail,
        "instance": request.path if has_request_context() else None,
        "code": code or code_for_status(status),
        "request_id": ensure_request_id(),
    }
    if details:
        problem["details"] = details
    return problem


def _render(problem: dict[str, Any], *, exc_info: bool = False) -> Response:
    status = int(problem["status"])
    level = logging.ERROR if status >= 500 else logging.WARNING
    log.log(
        level,
        "problem %s %s: %s",
        status,
        problem["code"],
        problem["detail"],
        extra={"code": problem["code"], "status": status},
        exc_info=exc_info,
    )
    response = jsonify(problem)
    response.status_code = status
    response.mimetype = "application/problem+json"
    return response


def problem_response(status: int, message: str, *, code: str | None = None) -> Response:
    """Problem response for callbacks that must return rather than raise (JWT loaders)."""
    return _render(build_problem(status, message, code=code))


class APIError(Exception):
    """
    An error with a known HTTP status, raised from views or translated from
    a service error.

    :param message: Client-safe ``detail``.
    :param status_code: HTTP status; ``400`` by default.
    :param code: Machine-readable code; derived from the status when omitted.
    :param details: Extra structured payload placed under ``details``.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code or code_for_status(self.status_code)
        self.details = details or {}

    def to_problem(self) -> dict[str, Any]:
        return build_problem(
            self.status_code, self.message, code=self.code, details=self.details or None
        )


class Forbidden(APIError):
    """403 raised by view decorators, e.g. a token lacking the ``admin`` scope."""

    def __init__(self, message: str = "Forbidden", code: str = "forbidden") -> None:
        super().__init__(message, status_code=HTTPStatus.FORBIDDEN, code=code)


def init_app(app: Flask) -> None:
    """Install handlers so no error leaves the app as HTML or a bare 500 page."""
    from forum.services._shared.base import translate_service_error
    from forum.services._shared.errors import ServiceError

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        return _render(err.to_problem())

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        return handle_api_error(translate_service_error(err))

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        return _render(
            build_problem(
                HTTPStatus.UNPROCESSABLE_ENTITY,
                "Validation failed",
                code="validation_error",
                details={"errors": err.messages},
            )
        )

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        if status == HTTPStatus.NOT_FOUND:
            detail = f"Route '{request.path}' not found"
        else:
            detail = (err.description or HTTPStatus(status).phrase).strip()
        return _render(build_problem(status, detail))

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        # A uniqueness race the service did not pre-check; never echo the SQL.
        return _render(
            build_problem(HTTPStatus.CONFLICT, "Resource conflict", code="conflict"),
            exc_info=True,
        )

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        return _render(
            build_problem(HTTPStatus.SERVICE_UNAVAILABLE, "Service temporarily unavailable"),
            exc_info=True,
        )

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        return _render(
            build_problem(HTTPStatus.INTERNAL_SERVER_ERROR, "Unexpected error"),
            exc_info=True,
        )
