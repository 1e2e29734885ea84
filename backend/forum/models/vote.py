"""Vote rows: one signed preference per (voter, target)."""

from __future__ import annotations

from enum import Enum

from sqlalchemy import CheckConstraint, ForeignKey, Index, SmallInteger, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from forum.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin


class VoteState(str, Enum):
    """Public vote state of a caller on a target."""

    UPVOTE = "upvote"
    DOWNVOTE = "downvote"
    NONE = "none"

    @property
    def value_sign(self) -> int:
        """Return the signed integer stored for this state (``0`` for none)."""
        return {VoteState.UPVOTE: 1, VoteState.DOWNVOTE: -1}.get(self, 0)

    @classmethod
    def from_value(cls, value: int | None) -> VoteState:
        """Map a stored ``+1``/``-1`` (or no row) back to a state."""
        if value == 1:
            return cls.UPVOTE
        if value == -1:
            return cls.DOWNVOTE
        return cls.NONE


class PostVote(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """A user's vote on a post. Clearing the vote deletes the row."""

    __tablename__ = "post_votes"

    post_id: Mapped[int] = mapped_column(ForeignKey("posts.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    value: Mapped[int] = mapped_column(SmallInteger, nullable=False)

    __table_args__ = (
        UniqueConstraint("post_id", "user_id", name="uq_post_votes_post_user"),
        CheckConstraint("value IN (1, -1)", name="value_is_signed_unit"),
        Index("ix_post_votes_user_id", "user_id"),
    )


class CommentVote(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """A user's vote on a comment. Clearing the vote deletes the row."""

    __tablename__ = "comment_votes"

    comment_id: Mapped[int] = mapped_column(
        ForeignKey("comments.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    value: Mapped[int] = mapped_column(SmallInteger, nullable=False)

    __table_args__ = (
        UniqueConstraint("comment_id", "user_id", name="uq_comment_votes_comment_user"),
        CheckConstraint("value IN (1, -1)", name="value_is_signed_unit"),
        Index("ix_comment_votes_user_id", "user_id"),
    )
