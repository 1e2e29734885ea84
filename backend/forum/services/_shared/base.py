"""Service base class, the request context it carries and HTTP error mapping."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime

from forum.core import errors as api_errors
from forum.models.base import utcnow
from forum.repositories.base import MAX_LIMIT, InvalidCursor, KeysetPage, Pagination, clamp_limit
from forum.services._shared.dto import CursorMeta
from forum.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    PreconditionFailedError,
    ServiceError,
    ValidationError,
)
from forum.services._shared.policies.common import is_owner
from forum.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

# Most specific first; ValidationError and bare ServiceError fall through to 400.
_HTTP_STATUS: tuple[tuple[type[ServiceError], int], ...] = (
    (NotFoundError, 404),
    (ConflictError, 409),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (PreconditionFailedError, 412),
)


def translate_service_error(exc: ServiceError) -> api_errors.APIError:
    """Wrap a service error in the :class:`~forum.core.errors.APIError` rendered to clients."""
    status = next((code for kind, code in _HTTP_STATUS if isinstance(exc, kind)), 400)
    return api_errors.APIError(str(exc), status_code=status, code=exc.code or "bad_request")


@dataclass(slots=True)
class ServiceContext:
    """
    Who is calling, as read from the access token.

    Members have ``actor_id`` and ``session_id``; guests only ``guest_id``;
    anonymous callers neither. ``request_id`` ties service logs to the request.
    """

    actor_id: int | None = None
    session_id: int | None = None
    request_id: str | None = None
    scopes: tuple[str, ...] = ()
    guest_id: int | None = None

    @property
    def is_member(self) -> bool:
        return self.actor_id is not None and "member" in self.scopes

    @property
    def is_admin(self) -> bool:
        return self.actor_id is not None and "admin" in self.scopes


class BaseService:
    """
    Common plumbing for use-case services.

    Every database access goes through a unit of work opened with
    :meth:`rw_uow` or :meth:`ro_uow`; services never use ``db.session``
    directly. Failures are raised as :class:`ServiceError` subclasses.
    """

    DEFAULT_READ_ISOLATION = "READ COMMITTED"

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        self.ctx = ctx or ServiceContext()

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork()

    def ro_uow(
        self, *, isolation: str | None = None, enforce_db_readonly: bool = True
    ) -> SQLAlchemyReadOnlyUnitOfWork:
        """Read-only scope; ``isolation`` overrides :attr:`DEFAULT_READ_ISOLATION`."""
        return SQLAlchemyReadOnlyUnitOfWork(
            isolation_level=isolation or self.DEFAULT_READ_ISOLATION,
            enforce_db_readonly=enforce_db_readonly,
        )

    def now(self) -> datetime:
        return utcnow()

    def ensure_pagination(
        self, *, page: int, limit: int, sort: Iterable[str] | None = None
    ) -> Pagination:
        """Offset window with ``page`` floored at 1 and ``limit`` clamped to ``1..100``."""
        return Pagination(
            page=max(1, int(page)),
            limit=clamp_limit(limit, maximum=MAX_LIMIT),
            sort=list(sort or []),
        )

    @contextmanager
    def keyset_errors(self) -> Iterator[None]:
        """Surface malformed cursors as ``invalid_cursor`` validation errors."""
        try:
            yield
        except InvalidCursor as exc:
            raise ValidationError(str(exc), code="invalid_cursor") from exc

    @staticmethod
    def cursor_meta(page: KeysetPage) -> CursorMeta:
        return CursorMeta(limit=page.limit, next_cursor=page.next_cursor, total=page.total)

    def require_actor(self) -> int:
        """
        Id of the calling member.

        Guests get ``403 guest_forbidden``; anonymous callers get ``401``.
        """
        if self.ctx.actor_id is None:
            if self.ctx.guest_id is not None:
                raise AuthorizationError("Guests cannot perform this action.", code="guest_forbidden")
            raise AuthenticationError("Authentication required.")
        if self.ctx.scopes and "member" not in self.ctx.scopes:
            raise AuthorizationError("Member scope required.")
        return self.ctx.actor_id

    def ensure_if_match(self, provided_etag: str | None, current_etag: str | None) -> None:
        # No header means the client opted out of the concurrency check.
        if provided_etag is not None and provided_etag != current_etag:
            raise PreconditionFailedError()

    def ensure_owner(self, actor_id: int | None, owner_id: int, *, msg: str | None = None) -> None:
        if not is_owner(actor_id=actor_id, owner_id=owner_id):
            raise AuthorizationError(msg or "You can only modify your own resources.")


__all__ = ["BaseService", "ServiceContext", "translate_service_error"]
