"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    AuthorizedSchema,
    GuestJoinSchema,
    GuestTokenSchema,
    JoinSchema,
    LoginSchema,
    PasswordChangeSchema,
    RefreshSchema,
    SessionSchema,
    TokenPairSchema,
)
from .common import (
    CursorMetaSchema,
    CursorQuerySchema,
    MetaSchema,
    PaginationQuerySchema,
    build_cursor_meta,
    build_meta,
)
from .community import (
    CommunityCreateSchema,
    CommunitySchema,
    CommunitySearchSchema,
    CommunityUpdateSchema,
    MemberSchema,
    MembershipInputSchema,
    MembershipSchema,
    RecentCommunitySchema,
    RuleCreateSchema,
    RuleListQuerySchema,
    RuleSchema,
    RuleUpdateSchema,
)
from .moderation import (
    ReservedTermCreateSchema,
    ReservedTermSchema,
    RestrictionCreateSchema,
    RestrictionQuerySchema,
    RestrictionSchema,
)
from .post import (
    CommentCreateSchema,
    CommentListQuerySchema,
    CommentSchema,
    CommentSnapshotSchema,
    CommentUpdateSchema,
    CommentVoteSchema,
    PostCreateSchema,
    PostFeedQuerySchema,
    PostSchema,
    PostSnapshotSchema,
    PostUpdateSchema,
    PostVoteSchema,
    VoteSchema,
)
from .user import AdminUserSchema, UserFilterSchema, UserPrivateSchema, UserPublicSchema, UserUpdateSchema

__all__ = [
    "AdminUserSchema",
    "AuthorizedSchema",
    "CommentCreateSchema",
    "CommentListQuerySchema",
    "CommentSchema",
    "CommentSnapshotSchema",
    "CommentUpdateSchema",
    "CommentVoteSchema",
    "CommunityCreateSchema",
    "CommunitySchema",
    "CommunitySearchSchema",
    "CommunityUpdateSchema",
    "CursorMetaSchema",
    "CursorQuerySchema",
    "GuestJoinSchema",
    "GuestTokenSchema",
    "JoinSchema",
    "LoginSchema",
    "MemberSchema",
    "MembershipInputSchema",
    "MembershipSchema",
    "MetaSchema",
    "PaginationQuerySchema",
    "PasswordChangeSchema",
    "PostCreateSchema",
    "PostFeedQuerySchema",
    "PostSchema",
    "PostSnapshotSchema",
    "PostUpdateSchema",
    "PostVoteSchema",
    "RecentCommunitySchema",
    "RefreshSchema",
    "ReservedTermCreateSchema",
    "ReservedTermSchema",
    "RestrictionCreateSchema",
    "RestrictionQuerySchema",
    "RestrictionSchema",
    "RuleCreateSchema",
    "RuleListQuerySchema",
    "RuleSchema",
    "RuleUpdateSchema",
    "SessionSchema",
    "TokenPairSchema",
    "UserFilterSchema",
    "UserPrivateSchema",
    "UserPublicSchema",
    "UserUpdateSchema",
    "VoteSchema",
    "build_cursor_meta",
    "build_meta",
]
