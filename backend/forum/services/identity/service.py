from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from forum.repositories.user import UserRepository
from forum.services._shared.base import BaseService
from forum.services._shared.errors import ConflictError, NotFoundError

from ._converters import user_to_private, user_to_public
from .dto import UserPrivateOut, UserPublicOut, UserUpdateIn

logger = logging.getLogger(__name__)


class IdentityService(BaseService):
    """Read and maintain user accounts on behalf of their owner."""

    def get_me(self) -> UserPrivateOut:
        """Return the caller's own account.

        :raises NotFoundError: If the account was deactivated meanwhile.
        """
        actor_id = self.require_actor()
        with self.ro_uow() as uow:
            user = uow.users.get_live(actor_id)
            if user is None:
                raise NotFoundError("User", actor_id)
            return user_to_private(user)

    def get_public(self, user_id: int) -> UserPublicOut:
        """Return a public profile; deactivated accounts are not found."""
        with self.ro_uow() as uow:
            user = uow.users.get_live(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            return user_to_public(user)

    def update_profile(self, dto: UserUpdateIn) -> UserPrivateOut:
        """Apply a partial profile update to the caller's own account.

        :raises AuthorizationError: When ``dto.user_id`` is not the caller.
        :raises ConflictError: When the new username is already taken.
        """
        actor_id = self.require_actor()
        self.ensure_owner(actor_id, dto.user_id, msg="You can only edit your own profile.")

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get_live(dto.user_id)
            if user is None:
                raise NotFoundError("User", dto.user_id)

            updates: dict[str, object] = {}
            if dto.username is not None and dto.username != user.username:
                if repo.exists_by_username(dto.username, exclude_id=user.id):
                    raise ConflictError("User", "username already taken")
                updates["username"] = dto.username
            if dto.clear_display_name:
                updates["display_name"] = None
            elif dto.display_name is not None:
                updates["display_name"] = dto.display_name

            if updates:
                try:
                    repo.assign_updates(user, updates)
                except IntegrityError as exc:
                    raise ConflictError("User", "username already taken") from exc

            logger.info("User profile updated", extra={"user_id": user.id, "fields": list(updates)})
            return user_to_private(user)

    def deactivate(self, user_id: int) -> None:
        """Soft-delete the caller's account and revoke every session."""
        actor_id = self.require_actor()
        self.ensure_owner(actor_id, user_id, msg="You can only deactivate your own account.")

        now = self.now()
        with self.rw_uow() as uow:
            user = uow.users.get_for_update(user_id)
            if user is None or user.is_deleted:
                raise NotFoundError("User", user_id)
            user.mark_deleted(now)
            revoked = uow.sessions.revoke_all_for_user(user_id, when=now)
            logger.info("User deactivated", extra={"user_id": user_id, "sessions_revoked": revoked})
