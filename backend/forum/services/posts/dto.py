"""DTOs for posts and their edit history."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from forum.services._shared.dto import CursorMeta, PageMeta

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class PostCreateIn:
    """
    Input DTO to publish a post.

    :param community_name: Target community (any casing).
    :param title: 5-120 chars.
    :param body: 10-10000 chars of plain text.
    :param author_display_name: Optional byline override (<= 32 chars).
    """

    community_name: str
    title: str
    body: str
    author_display_name: str | None = None


@dataclass(frozen=True, slots=True)
class PostUpdateIn:
    """
    Partial edit of a post; the previous version is kept as a snapshot.

    :param if_match: Optional ETag for optimistic concurrency.
    """

    post_id: int
    title: str | None = None
    body: str | None = None
    author_display_name: str | None = None
    if_match: str | None = None


@dataclass(frozen=True, slots=True)
class PostFeedIn:
    """
    Keyset feed query.

    :param sort: ``"newest"`` or ``"top"``.
    :param community_name: Restrict to one community when given.
    :param q: Text filter, at least two characters.
    """

    sort: str = "newest"
    community_name: str | None = None
    q: str | None = None
    cursor: str | None = None
    limit: int = 20


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class PostAuthorOut:
    id: int
    username: str
    display_name: str | None


@dataclass(frozen=True, slots=True)
class PostCommunityOut:
    id: int
    name: str


@dataclass(frozen=True, slots=True)
class PostOut:
    """
    Post projection.

    ``my_vote`` is ``"upvote"``, ``"downvote"`` or ``"none"`` for members and
    ``None`` for anonymous or guest callers.
    """

    id: int
    community: PostCommunityOut
    author: PostAuthorOut
    title: str
    body: str
    author_display_name: str | None
    score: int
    comment_count: int
    created_at: datetime
    updated_at: datetime
    etag: str
    my_vote: str | None = None


@dataclass(frozen=True, slots=True)
class PostListOut:
    items: list[PostOut]
    meta: CursorMeta


@dataclass(frozen=True, slots=True)
class PostSnapshotOut:
    id: int
    post_id: int
    editor_id: int
    title: str
    body: str
    author_display_name: str | None
    created_at: datetime


@dataclass(frozen=True, slots=True)
class PostSnapshotListOut:
    items: list[PostSnapshotOut]
    meta: PageMeta
