from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from forum.models.community import Community, CommunityCategory, CommunityMembership, CommunityRule
from forum.repositories.community import CommunityRepository
from forum.services._shared.base import BaseService
from forum.services._shared.errors import ConflictError, NotFoundError, ValidationError
from forum.services._shared.policies.moderation import ensure_can_write

from ._converters import community_to_out
from .dto import CommunityCreateIn, CommunityOut, CommunityUpdateIn

logger = logging.getLogger(__name__)

MAX_INITIAL_RULES = 20


def resolve_category(raw: str) -> CommunityCategory:
    """:raises ValidationError: ``invalid_category`` for unknown values."""
    try:
        return CommunityCategory(raw)
    except ValueError as exc:
        raise ValidationError(f"Unknown category: {raw}", code="invalid_category") from exc


class CommunityCommandService(BaseService):
    """Create, edit and remove communities. Only the owner may edit or remove."""

    def create(self, dto: CommunityCreateIn) -> CommunityOut:
        """
        Create a community owned by the caller, who also becomes its first member.

        :raises ValidationError: Too many or duplicated initial rules, unknown category.
        :raises ConflictError: The name is reserved or already taken.
        """
        actor_id = self.require_actor()
        category = resolve_category(dto.category)
        if len(dto.rules) > MAX_INITIAL_RULES:
            raise ValidationError(f"A community can start with at most {MAX_INITIAL_RULES} rules.")
        orders = [r.order_index for r in dto.rules]
        if len(set(orders)) != len(orders):
            raise ValidationError("Rule order_index values must be unique.", code="duplicate_rule_order")

        now = self.now()
        with self.rw_uow() as uow:
            repo: CommunityRepository = uow.communities
            ensure_can_write(uow.restrictions, actor_id, now)
            if uow.reserved_terms.is_reserved(dto.name):
                raise ConflictError("Community", "name is reserved")
            if repo.name_taken(dto.name):
                raise ConflictError("Community", "name already taken")

            try:
                community = Community(
                    owner_id=actor_id,
                    name=dto.name,
                    category=category,
                    description=dto.description,
                    logo_uri=dto.logo_uri,
                    banner_uri=dto.banner_uri,
                    member_count=1,
                    last_active_at=now,
                )
            except ValueError as exc:
                raise ValidationError(str(exc), code="invalid_name") from exc
            community.rules = [CommunityRule(order_index=r.order_index, text=r.text) for r in dto.rules]

            try:
                repo.add(community)
            except IntegrityError as exc:
                raise ConflictError("Community", "name already taken") from exc

            uow.memberships.add(
                CommunityMembership(community_id=community.id, user_id=actor_id, joined_at=now)
            )
            uow.recent_communities.touch(actor_id, community.id, now)
            logger.info(
                "Community created",
                extra={"community_id": community.id, "owner_id": actor_id, "rules": len(dto.rules)},
            )
            return community_to_out(community, with_rules=True, joined=True)

    def update(self, dto: CommunityUpdateIn) -> CommunityOut:
        """Update mutable community fields (owner only)."""
        actor_id = self.require_actor()
        with self.rw_uow() as uow:
            repo: CommunityRepository = uow.communities
            community = repo.get_by_name(dto.name)
            if community is None:
                raise NotFoundError("Community", dto.name)
            self.ensure_owner(
                actor_id, community.owner_id, msg="Only the owner can edit this community."
            )
            ensure_can_write(uow.restrictions, actor_id, self.now())

            updates: dict[str, object] = {}
            if dto.description is not None:
                updates["description"] = dto.description
            if dto.category is not None:
                updates["category"] = resolve_category(dto.category)
            if dto.logo_uri is not None:
                updates["logo_uri"] = dto.logo_uri
            if dto.banner_uri is not None:
                updates["banner_uri"] = dto.banner_uri
            if updates:
                repo.assign_updates(community, updates)

            logger.info("Community updated", extra={"community_id": community.id, "fields": list(updates)})
            return community_to_out(community, with_rules=True, joined=True)

    def delete(self, name: str) -> None:
        """Soft-delete a community (owner only)."""
        actor_id = self.require_actor()
        with self.rw_uow() as uow:
            repo: CommunityRepository = uow.communities
            community = repo.get_by_name(name)
            if community is None:
                raise NotFoundError("Community", name)
            self.ensure_owner(
                actor_id, community.owner_id, msg="Only the owner can delete this community."
            )
            repo.delete(community)
            logger.info("Community deleted", extra={"community_id": community.id})
