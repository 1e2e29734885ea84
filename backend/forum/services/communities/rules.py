from __future__ import annotations

import logging

from forum.models.community import Community, CommunityRule
from forum.repositories.community import CommunityRuleRepository
from forum.services._shared.base import BaseService
from forum.services._shared.errors import ConflictError, NotFoundError, ValidationError

from ._converters import rule_to_out
from .dto import RuleCreateIn, RuleListIn, RuleListOut, RuleOut, RuleUpdateIn

logger = logging.getLogger(__name__)

RULE_SORTS = {"order", "created_at"}


class CommunityRuleService(BaseService):
    """Community rules: public keyset listing, owner-only writes."""

    # ------------------------------ Reads ---------------------------------

    def list(self, dto: RuleListIn) -> RuleListOut:
        if dto.sort not in RULE_SORTS:
            raise ValidationError(f"Unsupported sort: {dto.sort}", code="invalid_sort")
        with self.ro_uow() as uow:
            community = self._community(uow, dto.name)
            repo: CommunityRuleRepository = uow.rules
            with self.keyset_errors():
                page = repo.page_for_community(
                    community.id,
                    sort=dto.sort,
                    descending=dto.order == "desc",
                    q=dto.q,
                    cursor=dto.cursor,
                    limit=dto.limit,
                )
            return RuleListOut(items=[rule_to_out(r) for r in page.items], meta=self.cursor_meta(page))

    def get(self, name: str, rule_id: int) -> RuleOut:
        with self.ro_uow() as uow:
            community = self._community(uow, name)
            return rule_to_out(self._rule(uow, community, rule_id))

    # ------------------------------ Writes --------------------------------

    def create(self, dto: RuleCreateIn) -> RuleOut:
        """:raises ConflictError: ``order_index`` already used by an active rule."""
        actor_id = self.require_actor()
        with self.rw_uow() as uow:
            community = self._owned_community(uow, dto.name, actor_id)
            repo: CommunityRuleRepository = uow.rules
            if repo.order_index_taken(community.id, dto.order_index):
                raise ConflictError("CommunityRule", "order_index already used")
            rule = repo.add(
                CommunityRule(community_id=community.id, order_index=dto.order_index, text=dto.text)
            )
            logger.info("Community rule created", extra={"community_id": community.id, "rule_id": rule.id})
            return rule_to_out(rule)

    def update(self, dto: RuleUpdateIn) -> RuleOut:
        actor_id = self.require_actor()
        with self.rw_uow() as uow:
            community = self._owned_community(uow, dto.name, actor_id)
            repo: CommunityRuleRepository = uow.rules
            rule = self._rule(uow, community, dto.rule_id)

            updates: dict[str, object] = {}
            if dto.order_index is not None and dto.order_index != rule.order_index:
                if repo.order_index_taken(community.id, dto.order_index, exclude_id=rule.id):
                    raise ConflictError("CommunityRule", "order_index already used")
                updates["order_index"] = dto.order_index
            if dto.text is not None:
                updates["text"] = dto.text
            if updates:
                repo.assign_updates(rule, updates)

            logger.info("Community rule updated", extra={"rule_id": rule.id, "fields": list(updates)})
            return rule_to_out(rule)

    def delete(self, name: str, rule_id: int) -> None:
        actor_id = self.require_actor()
        with self.rw_uow() as uow:
            community = self._owned_community(uow, name, actor_id)
            rule = self._rule(uow, community, rule_id)
            uow.rules.delete(rule)
            logger.info("Community rule deleted", extra={"rule_id": rule_id})

    # ------------------------------ Helpers -------------------------------

    @staticmethod
    def _community(uow, name: str) -> Community:
        community = uow.communities.get_by_name(name)
        if community is None:
            raise NotFoundError("Community", name)
        return community

    def _owned_community(self, uow, name: str, actor_id: int) -> Community:
        community = self._community(uow, name)
        self.ensure_owner(actor_id, community.owner_id, msg="Only the owner can manage rules.")
        return community

    @staticmethod
    def _rule(uow, community: Community, rule_id: int) -> CommunityRule:
        rule = uow.rules.get_in_community(rule_id, community.id)
        if rule is None:
            raise NotFoundError("CommunityRule", rule_id)
        return rule
