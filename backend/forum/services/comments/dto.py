"""DTOs for comments and their edit history."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from forum.services._shared.dto import CursorMeta, PageMeta
from forum.services.posts.dto import PostAuthorOut


@dataclass(frozen=True, slots=True)
class CommentCreateIn:
    """
    Input DTO to comment on a post.

    :param post_id: Commented post.
    :param content: 2-2000 chars.
    :param parent_id: Comment being replied to (same post), if any.
    """

    post_id: int
    content: str
    parent_id: int | None = None


@dataclass(frozen=True, slots=True)
class CommentUpdateIn:
    comment_id: int
    content: str
    if_match: str | None = None


@dataclass(frozen=True, slots=True)
class CommentListIn:
    """
    Keyset listing of comments.

    :param sort: ``"newest"``, ``"oldest"`` or ``"top"``.
    """

    sort: str = "newest"
    cursor: str | None = None
    limit: int = 20


@dataclass(frozen=True, slots=True)
class CommentOut:
    id: int
    post_id: int
    parent_id: int | None
    author: PostAuthorOut
    content: str
    depth: int
    score: int
    created_at: datetime
    updated_at: datetime
    etag: str
    my_vote: str | None = None


@dataclass(frozen=True, slots=True)
class CommentListOut:
    items: list[CommentOut]
    meta: CursorMeta


@dataclass(frozen=True, slots=True)
class CommentSnapshotOut:
    id: int
    comment_id: int
    editor_id: int
    content: str
    created_at: datetime


@dataclass(frozen=True, slots=True)
class CommentSnapshotListOut:
    items: list[CommentSnapshotOut]
    meta: PageMeta
