"""Post and comment models with their edit snapshots."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from forum.core.extensions import db

from .base import PKMixin, ReprMixin, SoftDeleteMixin, TimestampMixin

if TYPE_CHECKING:
    from .community import Community
    from .user import User


class Post(PKMixin, ReprMixin, TimestampMixin, SoftDeleteMixin, db.Model):
    """
    Text post published in a community.

    ``score`` is the sum of the post's vote values and ``comment_count`` the
    number of live comments; both are denormalized and recomputed by the
    services that mutate votes and comments, so feeds can sort on them.
    """

    __tablename__ = "posts"

    community_id: Mapped[int] = mapped_column(
        ForeignKey("communities.id", ondelete="CASCADE"), nullable=False
    )
    author_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title: Mapped[str] = mapped_column(String(120), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    author_display_name: Mapped[str | None] = mapped_column(String(32), nullable=True)
    score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comment_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    community: Mapped[Community] = relationship("Community", lazy="joined")
    author: Mapped[User] = relationship("User", lazy="joined")

    __table_args__ = (
        CheckConstraint("comment_count >= 0", name="comment_count_non_negative"),
        Index("ix_posts_community_id_created_at", "community_id", "created_at"),
        Index("ix_posts_created_at", "created_at"),
        Index("ix_posts_score", "score"),
    )


class PostSnapshot(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """Immutable copy of a post's editable fields taken before each edit."""

    __tablename__ = "post_snapshots"

    post_id: Mapped[int] = mapped_column(ForeignKey("posts.id", ondelete="CASCADE"), nullable=False)
    editor_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title: Mapped[str] = mapped_column(String(120), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    author_display_name: Mapped[str | None] = mapped_column(String(32), nullable=True)

    __table_args__ = (Index("ix_post_snapshots_post_id", "post_id"),)


class Comment(PKMixin, ReprMixin, TimestampMixin, SoftDeleteMixin, db.Model):
    """
    Comment on a post, optionally replying to another comment of the same post.

    ``depth`` is 1 for top-level comments and grows by one per reply level.
    """

    __tablename__ = "comments"

    post_id: Mapped[int] = mapped_column(ForeignKey("posts.id", ondelete="CASCADE"), nullable=False)
    author_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    parent_id: Mapped[int | None] = mapped_column(
        ForeignKey("comments.id", ondelete="CASCADE"), nullable=True
    )
    content: Mapped[str] = mapped_column(String(2000), nullable=False)
    depth: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    post: Mapped[Post] = relationship("Post", lazy="joined")
    author: Mapped[User] = relationship("User", lazy="joined")

    __table_args__ = (
        CheckConstraint("depth >= 1", name="depth_positive"),
        Index("ix_comments_post_id_created_at", "post_id", "created_at"),
        Index("ix_comments_parent_id", "parent_id"),
    )


class CommentSnapshot(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """Immutable copy of a comment's content taken before each edit."""

    __tablename__ = "comment_snapshots"

    comment_id: Mapped[int] = mapped_column(
        ForeignKey("comments.id", ondelete="CASCADE"), nullable=False
    )
    editor_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content: Mapped[str] = mapped_column(String(2000), nullable=False)

    __table_args__ = (Index("ix_comment_snapshots_comment_id", "comment_id"),)
