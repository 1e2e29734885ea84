"""Posts: publishing, feeds, search and edit history."""

from .command import PostCommandService
from .dto import (
    PostCreateIn,
    PostFeedIn,
    PostListOut,
    PostOut,
    PostSnapshotListOut,
    PostSnapshotOut,
    PostUpdateIn,
)
from .query import PostQueryService

__all__ = [
    "PostCommandService",
    "PostCreateIn",
    "PostFeedIn",
    "PostListOut",
    "PostOut",
    "PostQueryService",
    "PostSnapshotListOut",
    "PostSnapshotOut",
    "PostUpdateIn",
]
