"""
Exceptions raised by services, repositories and models.

Nothing here knows about HTTP. Each class carries a default ``code`` that
clients see in the problem body; raise sites may pass a more specific one
(``guest_forbidden``, ``account_suspended``, ``invalid_cursor``...). The HTTP
status is chosen by :func:`forum.services._shared.base.translate_service_error`.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Whether ``exc`` was raised by the named constraint.

    PostgreSQL reports the constraint name, SQLite the offending columns, so
    callers pass whichever token identifies the violation on their backend
    (``"uq_users_email"`` or ``"users.email"``).
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return constraint_name.lower() in message


class ServiceError(Exception):
    """Root of the service error hierarchy; rendered as ``400`` when unmapped."""

    code: str | None = "bad_request"

    def __init__(self, message: str = "", *, code: str | None = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code


class ValidationError(ServiceError):
    """Well-formed input that breaks a domain rule (body markup, depth, vote state)."""

    code = "validation_error"


class AuthenticationError(ServiceError):
    """No usable identity: bad credentials, unknown or revoked token, closed session."""

    code = "unauthorized"


class AuthorizationError(ServiceError):
    """Known caller, refused action: guests writing, restricted accounts, non-owners."""

    code = "forbidden"


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Missing or soft-deleted entity.

    :param entity: Model name, e.g. ``"Post"``.
    :param key: Id, name or other lookup key.
    """

    entity: str
    key: str | int

    code = "not_found"

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """Taken email, username or community name, reserved term, duplicate rule order."""

    entity: str
    detail: str

    code = "conflict"

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


class PreconditionFailedError(ServiceError):
    """``If-Match`` carried an ETag that no longer matches the resource."""

    code = "precondition_failed"

    def __init__(self, message: str = "Precondition failed (ETag mismatch)") -> None:
        super().__init__(message)
