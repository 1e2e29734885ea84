"""Vote repositories: one row per (voter, target) and score aggregation."""

from __future__ import annotations

from typing import Any, TypeVar, cast

from sqlalchemy import func, select
from sqlalchemy.orm import InstrumentedAttribute

from forum.models.vote import CommentVote, PostVote
from forum.repositories.base import BaseRepository

V = TypeVar("V", PostVote, CommentVote)


class _VoteRepository(BaseRepository[V]):
    """
    Shared persistence for vote tables.

    Subclasses name the column pointing at the voted target in
    ``target_column``; it is resolved on the model class, never through
    the repository instance. Votes are hard-deleted when cleared so ``SUM(value)``
    over the remaining rows is always the target's score.
    """

    target_column: str

    @property
    def target_attr(self) -> InstrumentedAttribute[Any]:
        return getattr(self.model, self.target_column)

    def get_vote(self, target_id: int, user_id: int) -> V | None:
        """Return ``user_id``'s vote on the target, if any."""
        stmt = select(self.model).where(
            self.target_attr == target_id,
            self.model.user_id == user_id,  # type: ignore[attr-defined]
        )
        return cast(V | None, self.session.execute(stmt).scalars().first())

    def values_for_user(self, user_id: int, target_ids: list[int]) -> dict[int, int]:
        """Map target id -> vote value for the given user across ``target_ids``."""
        if not target_ids:
            return {}
        stmt = select(self.target_attr, self.model.value).where(  # type: ignore[attr-defined]
            self.model.user_id == user_id,  # type: ignore[attr-defined]
            self.target_attr.in_(target_ids),
        )
        return {int(tid): int(value) for tid, value in self.session.execute(stmt).all()}

    def score_for(self, target_id: int) -> int:
        """Return ``SUM(value)`` over the target's votes (0 without votes)."""
        self.flush()
        stmt = select(func.coalesce(func.sum(self.model.value), 0)).where(  # type: ignore[attr-defined]
            self.target_attr == target_id
        )
        return int(self.session.execute(stmt).scalar_one())


class PostVoteRepository(_VoteRepository[PostVote]):
    model = PostVote
    target_column = "post_id"


class CommentVoteRepository(_VoteRepository[CommentVote]):
    model = CommentVote
    target_column = "comment_id"
