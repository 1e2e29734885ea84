from __future__ import annotations

from forum.models.post import Comment, CommentSnapshot
from forum.services.posts.dto import PostAuthorOut

from .dto import CommentOut, CommentSnapshotOut


def comment_to_out(row: Comment, *, my_vote: str | None = None) -> CommentOut:
    return CommentOut(
        id=row.id,
        post_id=row.post_id,
        parent_id=row.parent_id,
        author=PostAuthorOut(
            id=row.author.id,
            username=row.author.username,
            display_name=row.author.display_name,
        ),
        content=row.content,
        depth=row.depth,
        score=row.score,
        created_at=row.created_at,
        updated_at=row.updated_at,
        etag=row.compute_etag(),
        my_vote=my_vote,
    )


def comment_snapshot_to_out(row: CommentSnapshot) -> CommentSnapshotOut:
    return CommentSnapshotOut(
        id=row.id,
        comment_id=row.comment_id,
        editor_id=row.editor_id,
        content=row.content,
        created_at=row.created_at,
    )
