"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from forum.repositories.base import (
    BaseRepository,
    InvalidCursor,
    KeysetPage,
    Page,
    Pagination,
    clamp_limit,
    decode_cursor,
    encode_cursor,
    keyset_after,
    paginate_keyset,
    paginate_select,
)
from forum.repositories.community import (
    CommunityMembershipRepository,
    CommunityRepository,
    CommunityRuleRepository,
    RecentCommunityRepository,
    ReservedTermRepository,
)
from forum.repositories.moderation import UserRestrictionRepository
from forum.repositories.post import (
    CommentRepository,
    CommentSnapshotRepository,
    PostRepository,
    PostSnapshotRepository,
)
from forum.repositories.session import GuestVisitorRepository, UserSessionRepository
from forum.repositories.user import UserRepository
from forum.repositories.vote import CommentVoteRepository, PostVoteRepository

__all__ = [
    # Base
    "BaseRepository",
    "InvalidCursor",
    "KeysetPage",
    "Page",
    "Pagination",
    "clamp_limit",
    "decode_cursor",
    "encode_cursor",
    "keyset_after",
    "paginate_keyset",
    "paginate_select",
    # Domain
    "CommentRepository",
    "CommentSnapshotRepository",
    "CommentVoteRepository",
    "CommunityMembershipRepository",
    "CommunityRepository",
    "CommunityRuleRepository",
    "GuestVisitorRepository",
    "PostRepository",
    "PostSnapshotRepository",
    "PostVoteRepository",
    "RecentCommunityRepository",
    "ReservedTermRepository",
    "UserRepository",
    "UserRestrictionRepository",
    "UserSessionRepository",
]
