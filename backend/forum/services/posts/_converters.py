from __future__ import annotations

from forum.models.post import Post, PostSnapshot
from forum.models.vote import VoteState

from .dto import PostAuthorOut, PostCommunityOut, PostOut, PostSnapshotOut


def my_vote_label(values: dict[int, int] | None, target_id: int) -> str | None:
    """Public vote state for a caller; ``None`` when the caller cannot vote."""
    if values is None:
        return None
    return VoteState.from_value(values.get(target_id)).value


def post_to_out(row: Post, *, my_vote: str | None = None) -> PostOut:
    return PostOut(
        id=row.id,
        community=PostCommunityOut(id=row.community.id, name=row.community.name),
        author=PostAuthorOut(
            id=row.author.id,
            username=row.author.username,
            display_name=row.author.display_name,
        ),
        title=row.title,
        body=row.body,
        author_display_name=row.author_display_name,
        score=row.score,
        comment_count=row.comment_count,
        created_at=row.created_at,
        updated_at=row.updated_at,
        etag=row.compute_etag(),
        my_vote=my_vote,
    )


def post_snapshot_to_out(row: PostSnapshot) -> PostSnapshotOut:
    return PostSnapshotOut(
        id=row.id,
        post_id=row.post_id,
        editor_id=row.editor_id,
        title=row.title,
        body=row.body,
        author_display_name=row.author_display_name,
        created_at=row.created_at,
    )
