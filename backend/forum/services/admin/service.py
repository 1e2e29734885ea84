from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from forum.models.base import as_utc
from forum.models.community import ReservedTerm
from forum.models.moderation import RestrictionType, UserRestriction
from forum.models.user import UserRole
from forum.services._shared.base import BaseService
from forum.services._shared.dto import PageMeta
from forum.services._shared.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

from ._converters import admin_user_to_out, reserved_term_to_out, restriction_to_out
from .dto import (
    AdminUserListOut,
    AdminUserOut,
    ReservedTermCreateIn,
    ReservedTermListOut,
    ReservedTermOut,
    RestrictionCreateIn,
    RestrictionListOut,
    RestrictionOut,
    RestrictionSearchIn,
    UserSearchIn,
)

logger = logging.getLogger(__name__)


class AdminService(BaseService):
    """Site administration. Every HTTP-facing method requires the admin scope."""

    def require_admin(self) -> int:
        """:raises AuthorizationError: ``admin_required`` for non-admins."""
        actor_id = self.require_actor()
        if not self.ctx.is_admin:
            raise AuthorizationError("Administrator role required.", code="admin_required")
        return actor_id

    # ------------------------------ Users ---------------------------------

    def list_users(self, dto: UserSearchIn) -> AdminUserListOut:
        self.require_admin()
        pagination = self.ensure_pagination(page=dto.page, limit=dto.limit, sort=dto.sort or ["id"])
        with self.ro_uow() as uow:
            result = uow.users.search(pagination, q=dto.q)
            return AdminUserListOut(
                items=[admin_user_to_out(u) for u in result.items],
                meta=PageMeta(page=result.page, limit=result.limit, total=result.total),
            )

    def get_user(self, user_id: int) -> AdminUserOut:
        self.require_admin()
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            return admin_user_to_out(user)

    def assign_role(self, email: str, role: UserRole) -> AdminUserOut:
        """
        Set the platform role of an account.

        Operator-only: called from the ``flask users`` CLI, never over HTTP.
        """
        with self.rw_uow() as uow:
            user = uow.users.get_by_email(email)
            if user is None:
                raise NotFoundError("User", email)
            user.role = role
            uow.users.flush()
            logger.info("User role changed", extra={"user_id": user.id, "role": role.value})
            return admin_user_to_out(user)

    # --------------------------- Restrictions -----------------------------

    def create_restriction(self, dto: RestrictionCreateIn) -> RestrictionOut:
        """
        Restrict a user. Suspensions also revoke every open session.

        :raises ValidationError: Self-restriction, unknown type or an end in the past.
        """
        actor_id = self.require_admin()
        if dto.user_id == actor_id:
            raise ValidationError("Administrators cannot restrict themselves.", code="self_restriction")
        try:
            restriction_type = RestrictionType(dto.restriction_type)
        except ValueError as exc:
            raise ValidationError(
                f"Unknown restriction type: {dto.restriction_type}", code="invalid_restriction_type"
            ) from exc

        now = self.now()
        until = as_utc(dto.restricted_until)
        if until is not None and until <= now:
            raise ValidationError("restricted_until must be in the future.", code="invalid_restricted_until")

        with self.rw_uow() as uow:
            user = uow.users.get_live(dto.user_id)
            if user is None:
                raise NotFoundError("User", dto.user_id)
            restriction = uow.restrictions.add(
                UserRestriction(
                    user_id=user.id,
                    issued_by_id=actor_id,
                    restriction_type=restriction_type,
                    reason=dto.reason,
                    restricted_until=until,
                )
            )
            revoked = 0
            if restriction_type == RestrictionType.SUSPENDED:
                revoked = uow.sessions.revoke_all_for_user(user.id, when=now)
            logger.info(
                "User restricted",
                extra={
                    "restriction_id": restriction.id,
                    "user_id": user.id,
                    "type": restriction_type.value,
                    "sessions_revoked": revoked,
                },
            )
            return restriction_to_out(restriction, now=now)

    def list_restrictions(self, dto: RestrictionSearchIn) -> RestrictionListOut:
        self.require_admin()
        pagination = self.ensure_pagination(page=dto.page, limit=dto.limit, sort=["-created_at"])
        now = self.now()
        with self.ro_uow() as uow:
            result = uow.restrictions.search(pagination, now=now, user_id=dto.user_id, active=dto.active)
            return RestrictionListOut(
                items=[restriction_to_out(r, now=now) for r in result.items],
                meta=PageMeta(page=result.page, limit=result.limit, total=result.total),
            )

    def get_restriction(self, restriction_id: int) -> RestrictionOut:
        self.require_admin()
        with self.ro_uow() as uow:
            restriction = uow.restrictions.get(restriction_id)
            if restriction is None:
                raise NotFoundError("UserRestriction", restriction_id)
            return restriction_to_out(restriction, now=self.now())

    def revoke_restriction(self, restriction_id: int) -> RestrictionOut:
        """Lift a restriction early; revoking twice keeps the first timestamp."""
        self.require_admin()
        now = self.now()
        with self.rw_uow() as uow:
            restriction = uow.restrictions.get_for_update(restriction_id)
            if restriction is None:
                raise NotFoundError("UserRestriction", restriction_id)
            if restriction.revoked_at is None:
                restriction.revoked_at = now
                uow.restrictions.flush()
                logger.info("Restriction revoked", extra={"restriction_id": restriction_id})
            return restriction_to_out(restriction, now=now)

    # --------------------------- Reserved terms ---------------------------

    def list_reserved_terms(self, *, page: int = 1, limit: int = 20) -> ReservedTermListOut:
        self.require_admin()
        pagination = self.ensure_pagination(page=page, limit=limit, sort=["term"])
        with self.ro_uow() as uow:
            result = uow.reserved_terms.paginate(pagination)
            return ReservedTermListOut(
                items=[reserved_term_to_out(t) for t in result.items],
                meta=PageMeta(page=result.page, limit=result.limit, total=result.total),
            )

    def create_reserved_term(self, dto: ReservedTermCreateIn) -> ReservedTermOut:
        self.require_admin()
        with self.rw_uow() as uow:
            if uow.reserved_terms.is_reserved(dto.term):
                raise ConflictError("ReservedTerm", "term already reserved")
            try:
                term = uow.reserved_terms.add(ReservedTerm(term=dto.term))
            except ValueError as exc:
                raise ValidationError(str(exc)) from exc
            except IntegrityError as exc:
                raise ConflictError("ReservedTerm", "term already reserved") from exc
            logger.info("Reserved term created", extra={"reserved_term_id": term.id})
            return reserved_term_to_out(term)

    def delete_reserved_term(self, term_id: int) -> None:
        self.require_admin()
        with self.rw_uow() as uow:
            term = uow.reserved_terms.get(term_id)
            if term is None:
                raise NotFoundError("ReservedTerm", term_id)
            uow.reserved_terms.delete(term)
            logger.info("Reserved term deleted", extra={"reserved_term_id": term_id})
