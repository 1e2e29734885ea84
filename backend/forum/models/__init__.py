from forum.models.community import (
    Community,
    CommunityCategory,
    CommunityMembership,
    CommunityRule,
    RecentCommunity,
    ReservedTerm,
)
from forum.models.moderation import RestrictionType, UserRestriction
from forum.models.post import Comment, CommentSnapshot, Post, PostSnapshot
from forum.models.session import GuestVisitor, UserSession
from forum.models.user import User, UserRole
from forum.models.vote import CommentVote, PostVote, VoteState

__all__ = [
    "Comment",
    "CommentSnapshot",
    "CommentVote",
    "Community",
    "CommunityCategory",
    "CommunityMembership",
    "CommunityRule",
    "GuestVisitor",
    "Post",
    "PostSnapshot",
    "PostVote",
    "RecentCommunity",
    "ReservedTerm",
    "RestrictionType",
    "User",
    "UserRestriction",
    "UserRole",
    "UserSession",
    "VoteState",
]
