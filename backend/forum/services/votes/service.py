from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from forum.models.vote import CommentVote, PostVote, VoteState
from forum.services._shared.base import BaseService
from forum.services._shared.errors import AuthorizationError, NotFoundError, ValidationError
from forum.services._shared.policies.moderation import ensure_can_write

from .dto import CommentVoteOut, PostVoteOut, VoteIn

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _Target:
    """How to reach a votable entity and its vote table through a UoW."""

    entity: str
    target_repo: str
    vote_repo: str
    vote_model: type[Any]
    fk: str


POST_TARGET = _Target("Post", "posts", "post_votes", PostVote, "post_id")
COMMENT_TARGET = _Target("Comment", "comments", "comment_votes", CommentVote, "comment_id")


def resolve_state(raw: str) -> VoteState:
    """:raises ValidationError: ``invalid_vote_state`` for unknown states."""
    try:
        return VoteState(raw)
    except ValueError as exc:
        raise ValidationError(f"Unknown vote state: {raw}", code="invalid_vote_state") from exc


class VoteService(BaseService):
    """
    Up/down votes on posts and comments.

    Each (voter, target) pair holds at most one vote row with value ``+1``
    or ``-1``. Casting the same state twice is a no-op, switching state
    flips the value in place and clearing deletes the row. After every
    change the target's ``score`` is recomputed as ``SUM(value)`` inside
    the same transaction, so the stored score never drifts from the votes.
    """

    def set_post_vote(self, dto: VoteIn) -> PostVoteOut:
        score, state = self._cast(POST_TARGET, dto.target_id, resolve_state(dto.state))
        return PostVoteOut(post_id=dto.target_id, score=score, my_vote=state.value)

    def clear_post_vote(self, post_id: int) -> PostVoteOut:
        score, state = self._cast(POST_TARGET, post_id, VoteState.NONE)
        return PostVoteOut(post_id=post_id, score=score, my_vote=state.value)

    def set_comment_vote(self, dto: VoteIn) -> CommentVoteOut:
        score, state = self._cast(COMMENT_TARGET, dto.target_id, resolve_state(dto.state))
        return CommentVoteOut(comment_id=dto.target_id, score=score, my_vote=state.value)

    def clear_comment_vote(self, comment_id: int) -> CommentVoteOut:
        score, state = self._cast(COMMENT_TARGET, comment_id, VoteState.NONE)
        return CommentVoteOut(comment_id=comment_id, score=score, my_vote=state.value)

    def _cast(self, target: _Target, target_id: int, state: VoteState) -> tuple[int, VoteState]:
        """
        Bring the caller's vote on a target to ``state`` and rescore the target.

        :raises NotFoundError: Missing target, or one that is deleted itself
            or through its post or community.
        :raises AuthorizationError: ``self_vote_forbidden`` on one's own
            content, ``guest_forbidden`` for guests, ``account_restricted``
            for restricted accounts.
        """
        actor_id = self.require_actor()
        now = self.now()
        with self.rw_uow() as uow:
            targets = getattr(uow, target.target_repo)
            row = targets.get_for_update(target_id)
            if row is None or row.is_deleted or targets.get_visible(target_id) is None:
                raise NotFoundError(target.entity, target_id)

            votes = getattr(uow, target.vote_repo)
            vote = votes.get_vote(target_id, actor_id)

            if state is VoteState.NONE:
                if vote is not None:
                    votes.delete(vote)
            else:
                if row.author_id == actor_id:
                    raise AuthorizationError(
                        "You cannot vote on your own content.", code="self_vote_forbidden"
                    )
                ensure_can_write(uow.restrictions, actor_id, now)
                if vote is None:
                    votes.add(
                        target.vote_model(
                            **{target.fk: target_id, "user_id": actor_id, "value": state.value_sign}
                        )
                    )
                elif vote.value != state.value_sign:
                    vote.value = state.value_sign

            previous = row.score
            row.score = votes.score_for(target_id)
            votes.flush()

            logger.info(
                "Vote applied",
                extra={
                    "target": target.entity,
                    "target_id": target_id,
                    "user_id": actor_id,
                    "state": state.value,
                    "score_delta": row.score - previous,
                },
            )
            return row.score, state
