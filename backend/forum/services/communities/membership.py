from __future__ import annotations

import logging

from forum.models.community import CommunityMembership
from forum.services._shared.base import BaseService
from forum.services._shared.errors import NotFoundError
from forum.services._shared.policies.moderation import ensure_can_write

from .dto import MembershipOut

logger = logging.getLogger(__name__)


class MembershipService(BaseService):
    """
    Join/leave toggle for communities.

    A membership row is never hard-deleted: leaving soft-deletes it and
    joining again revives it. ``member_count`` is recounted from the live
    rows after every change so repeated toggles cannot drift.
    """

    def set_membership(self, name: str, *, join: bool) -> MembershipOut:
        """Bring the caller's membership to the requested state (idempotent)."""
        actor_id = self.require_actor()
        now = self.now()
        with self.rw_uow() as uow:
            community = uow.communities.get_by_name(name)
            if community is None:
                raise NotFoundError("Community", name)
            if join:
                ensure_can_write(uow.restrictions, actor_id, now)

            repo = uow.memberships
            row = repo.get_row(community.id, actor_id)
            if join:
                if row is None:
                    row = repo.add(
                        CommunityMembership(community_id=community.id, user_id=actor_id, joined_at=now)
                    )
                elif row.is_deleted:
                    row.deleted_at = None
                    row.joined_at = now
                uow.recent_communities.touch(actor_id, community.id, now)
            elif row is not None and not row.is_deleted:
                row.mark_deleted(now)
            repo.flush()

            community.member_count = repo.count_active(community.id)

            joined = row is not None and not row.is_deleted
            logger.info(
                "Membership updated",
                extra={"community_id": community.id, "user_id": actor_id, "joined": joined},
            )
            return MembershipOut(
                community_id=community.id,
                joined=joined,
                member_count=community.member_count,
                joined_at=row.joined_at if joined and row is not None else None,
            )

    def leave(self, name: str) -> None:
        self.set_membership(name, join=False)
