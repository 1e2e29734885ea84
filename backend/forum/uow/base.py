"""
Abstract Unit of Work contract shared by the read-write and read-only scopes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from forum.repositories import (
        CommentRepository,
        CommentSnapshotRepository,
        CommentVoteRepository,
        CommunityMembershipRepository,
        CommunityRepository,
        CommunityRuleRepository,
        GuestVisitorRepository,
        PostRepository,
        PostSnapshotRepository,
        PostVoteRepository,
        RecentCommunityRepository,
        ReservedTermRepository,
        UserRepository,
        UserRestrictionRepository,
        UserSessionRepository,
    )


class UnitOfWork(ABC):
    """
    One use case's transaction, with every repository bound to it.

    Leaving the ``with`` block normally commits (read-write scopes) and an
    exception rolls back. Read-only scopes always roll back.
    """

    users: UserRepository
    sessions: UserSessionRepository
    guests: GuestVisitorRepository
    communities: CommunityRepository
    memberships: CommunityMembershipRepository
    recent_communities: RecentCommunityRepository
    rules: CommunityRuleRepository
    reserved_terms: ReservedTermRepository
    posts: PostRepository
    post_snapshots: PostSnapshotRepository
    comments: CommentRepository
    comment_snapshots: CommentSnapshotRepository
    post_votes: PostVoteRepository
    comment_votes: CommentVoteRepository
    restrictions: UserRestrictionRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...
    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...
    @abstractmethod
    def commit(self) -> None: ...
    @abstractmethod
    def rollback(self) -> None: ...
