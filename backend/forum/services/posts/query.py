from __future__ import annotations

from forum.repositories.post import POST_SORTS, PostRepository
from forum.services._shared.base import BaseService
from forum.services._shared.dto import PageMeta
from forum.services._shared.errors import NotFoundError, ValidationError

from ._converters import my_vote_label, post_snapshot_to_out, post_to_out
from .dto import PostFeedIn, PostListOut, PostOut, PostSnapshotListOut, PostSnapshotOut

LATEST_POSTS_LIMIT = 10
MIN_QUERY_LENGTH = 2


def normalize_query(q: str | None, *, required: bool = False) -> str | None:
    """
    Trim a free-text filter and enforce its minimum length.

    :raises ValidationError: ``invalid_query`` when too short (or missing and required).
    """
    value = (q or "").strip()
    if not value:
        if required:
            raise ValidationError("Query parameter 'q' is required.", code="invalid_query")
        return None
    if len(value) < MIN_QUERY_LENGTH:
        raise ValidationError(
            f"Query must be at least {MIN_QUERY_LENGTH} characters.", code="invalid_query"
        )
    return value


class PostQueryService(BaseService):
    """Read-only post projections: feeds, search, detail and history."""

    def feed(self, dto: PostFeedIn) -> PostListOut:
        """
        Keyset feed of live posts, global or per community.

        ``newest`` orders by ``(created_at, id)`` descending; ``top`` by
        ``(score, created_at, id)`` descending.
        """
        if dto.sort not in POST_SORTS:
            raise ValidationError(f"Unsupported sort: {dto.sort}", code="invalid_sort")
        q = normalize_query(dto.q)

        with self.ro_uow() as uow:
            community_id: int | None = None
            if dto.community_name is not None:
                community = uow.communities.get_by_name(dto.community_name)
                if community is None:
                    raise NotFoundError("Community", dto.community_name)
                community_id = community.id

            repo: PostRepository = uow.posts
            with self.keyset_errors():
                page = repo.feed(
                    sort=dto.sort,
                    community_id=community_id,
                    q=q,
                    cursor=dto.cursor,
                    limit=dto.limit,
                )
            my_votes = self._my_votes(uow, [p.id for p in page.items])
            return PostListOut(
                items=[post_to_out(p, my_vote=my_vote_label(my_votes, p.id)) for p in page.items],
                meta=self.cursor_meta(page),
            )

    def search(
        self,
        *,
        q: str | None,
        sort: str = "newest",
        cursor: str | None = None,
        limit: int = 20,
    ) -> PostListOut:
        """Search titles and bodies; ``q`` is mandatory."""
        q = normalize_query(q, required=True)
        return self.feed(PostFeedIn(sort=sort, q=q, cursor=cursor, limit=limit))

    def latest(self) -> list[PostOut]:
        with self.ro_uow() as uow:
            rows = uow.posts.latest(limit=LATEST_POSTS_LIMIT)
            my_votes = self._my_votes(uow, [p.id for p in rows])
            return [post_to_out(p, my_vote=my_vote_label(my_votes, p.id)) for p in rows]

    def get(self, post_id: int) -> PostOut:
        with self.ro_uow() as uow:
            post = uow.posts.get_visible(post_id)
            if post is None:
                raise NotFoundError("Post", post_id)
            my_votes = self._my_votes(uow, [post.id])
            return post_to_out(post, my_vote=my_vote_label(my_votes, post.id))

    def history(self, post_id: int, *, page: int = 1, limit: int = 20) -> PostSnapshotListOut:
        """Previous versions of a post, newest first."""
        pagination = self.ensure_pagination(page=page, limit=limit, sort=["-created_at"])
        with self.ro_uow() as uow:
            if uow.posts.get_visible(post_id) is None:
                raise NotFoundError("Post", post_id)
            result = uow.post_snapshots.page_for_post(post_id, pagination)
            return PostSnapshotListOut(
                items=[post_snapshot_to_out(s) for s in result.items],
                meta=PageMeta(page=result.page, limit=result.limit, total=result.total),
            )

    def history_item(self, post_id: int, snapshot_id: int) -> PostSnapshotOut:
        with self.ro_uow() as uow:
            if uow.posts.get_visible(post_id) is None:
                raise NotFoundError("Post", post_id)
            snapshot = uow.post_snapshots.get_for_post(snapshot_id, post_id)
            if snapshot is None:
                raise NotFoundError("PostSnapshot", snapshot_id)
            return post_snapshot_to_out(snapshot)

    def _my_votes(self, uow, post_ids: list[int]) -> dict[int, int] | None:
        if not self.ctx.is_member:
            return None
        return uow.post_votes.values_for_user(self.ctx.actor_id, post_ids)
