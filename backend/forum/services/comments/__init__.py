"""Threaded comments on posts."""

from .dto import (
    CommentCreateIn,
    CommentListIn,
    CommentListOut,
    CommentOut,
    CommentSnapshotListOut,
    CommentSnapshotOut,
    CommentUpdateIn,
)
from .service import MAX_COMMENT_DEPTH, CommentService

__all__ = [
    "MAX_COMMENT_DEPTH",
    "CommentCreateIn",
    "CommentListIn",
    "CommentListOut",
    "CommentOut",
    "CommentService",
    "CommentSnapshotListOut",
    "CommentSnapshotOut",
    "CommentUpdateIn",
]
