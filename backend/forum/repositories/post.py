"""Repositories for posts, comments and their edit snapshots."""

from __future__ import annotations

from typing import Any, cast

from sqlalchemy import Select, func, or_, select

from forum.models.community import Community
from forum.models.post import Comment, CommentSnapshot, Post, PostSnapshot
from forum.repositories.base import BaseRepository, KeysetKeys, KeysetPage, Page, Pagination

#: Public feed orderings. The id tiebreaker is appended by ``BaseRepository.keyset``.
POST_SORTS: dict[str, KeysetKeys] = {
    "newest": [(Post.created_at, True)],
    "top": [(Post.score, True), (Post.created_at, True)],
}

COMMENT_SORTS: dict[str, KeysetKeys] = {
    "newest": [(Comment.created_at, True)],
    "oldest": [(Comment.created_at, False)],
    "top": [(Comment.score, True), (Comment.created_at, True)],
}


class PostRepository(BaseRepository[Post]):
    """
    Persistence-only repository for :class:`Post`.

    Feeds are keyset paginated; see :data:`POST_SORTS` for the available
    orderings. A post is visible while it and its community are live;
    feeds, searches and ``get_visible`` show nothing else.
    """

    model = Post

    def _updatable_fields(self) -> set[str]:
        return {"title", "body", "author_display_name"}

    def _visible(self, stmt: Select[Any]) -> Select[Any]:
        return self._live(stmt).join(Community, Community.id == Post.community_id).where(
            Community.deleted_at.is_(None)
        )

    def get_visible(self, post_id: int) -> Post | None:
        stmt = self._visible(select(Post)).where(Post.id == post_id)
        return cast(Post | None, self.session.execute(stmt).scalars().first())

    def _text_filter(self, stmt: Select[Any], q: str) -> Select[Any]:
        return stmt.where(
            or_(Post.title.icontains(q, autoescape=True), Post.body.icontains(q, autoescape=True))
        )

    def feed(
        self,
        *,
        sort: str = "newest",
        community_id: int | None = None,
        q: str | None = None,
        cursor: str | None = None,
        limit: int = 20,
    ) -> KeysetPage[Post]:
        """Keyset-page visible posts, globally or within one community.

        :param sort: Key of :data:`POST_SORTS`.
        :param community_id: Restrict to one community when given.
        :param q: Case-insensitive "contains" filter on title or body.
        :raises KeyError: On an unknown ``sort``.
        """
        keys = POST_SORTS[sort]
        stmt = self._visible(select(Post))
        if community_id is not None:
            stmt = stmt.where(Post.community_id == community_id)
        if q:
            stmt = self._text_filter(stmt, q)
        return self.keyset(stmt, keys, cursor=cursor, limit=limit)

    def latest(self, *, limit: int = 10) -> list[Post]:
        """Return the ``limit`` newest visible posts."""
        stmt = (
            self._visible(select(Post))
            .order_by(Post.created_at.desc(), Post.id.desc())
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars().all())

    def sum_comments(self, post_id: int) -> int:
        """Count the live comments of a post."""
        stmt = select(func.count(Comment.id)).where(
            Comment.post_id == post_id, Comment.deleted_at.is_(None)
        )
        return int(self.session.execute(stmt).scalar_one())


class PostSnapshotRepository(BaseRepository[PostSnapshot]):
    model = PostSnapshot

    def _sortable_fields(self):
        return {"created_at": PostSnapshot.created_at}

    def page_for_post(self, post_id: int, pagination: Pagination) -> Page[PostSnapshot]:
        return self.paginate_stmt(select(PostSnapshot).where(PostSnapshot.post_id == post_id), pagination)

    def get_for_post(self, snapshot_id: int, post_id: int) -> PostSnapshot | None:
        stmt = select(PostSnapshot).where(
            PostSnapshot.id == snapshot_id, PostSnapshot.post_id == post_id
        )
        return cast(PostSnapshot | None, self.session.execute(stmt).scalars().first())


class CommentRepository(BaseRepository[Comment]):
    """
    Persistence-only repository for :class:`Comment`.

    A comment is visible while it, its post and the post's community are
    all live.
    """

    model = Comment

    def _updatable_fields(self) -> set[str]:
        return {"content"}

    def _visible(self, stmt: Select[Any]) -> Select[Any]:
        return (
            self._live(stmt)
            .join(Post, Post.id == Comment.post_id)
            .join(Community, Community.id == Post.community_id)
            .where(Post.deleted_at.is_(None), Community.deleted_at.is_(None))
        )

    def get_visible(self, comment_id: int) -> Comment | None:
        stmt = self._visible(select(Comment)).where(Comment.id == comment_id)
        return cast(Comment | None, self.session.execute(stmt).scalars().first())

    def top_level(
        self,
        post_id: int,
        *,
        sort: str = "newest",
        cursor: str | None = None,
        limit: int = 20,
    ) -> KeysetPage[Comment]:
        """Keyset-page the live top-level comments of a post.

        :raises KeyError: On an unknown ``sort`` (see :data:`COMMENT_SORTS`).
        """
        keys = COMMENT_SORTS[sort]
        stmt = self._live(select(Comment)).where(
            Comment.post_id == post_id, Comment.parent_id.is_(None)
        )
        return self.keyset(stmt, keys, cursor=cursor, limit=limit)

    def replies(
        self,
        parent_id: int,
        *,
        cursor: str | None = None,
        limit: int = 20,
    ) -> KeysetPage[Comment]:
        """Keyset-page the live direct replies of a comment, oldest first."""
        stmt = self._live(select(Comment)).where(Comment.parent_id == parent_id)
        return self.keyset(stmt, COMMENT_SORTS["oldest"], cursor=cursor, limit=limit)

    def search(
        self,
        q: str,
        *,
        sort: str = "newest",
        cursor: str | None = None,
        limit: int = 20,
    ) -> KeysetPage[Comment]:
        """Keyset-page visible comments whose content contains ``q``."""
        keys = COMMENT_SORTS[sort]
        stmt = self._visible(select(Comment)).where(Comment.content.icontains(q, autoescape=True))
        return self.keyset(stmt, keys, cursor=cursor, limit=limit)


class CommentSnapshotRepository(BaseRepository[CommentSnapshot]):
    model = CommentSnapshot

    def _sortable_fields(self):
        return {"created_at": CommentSnapshot.created_at}

    def page_for_comment(self, comment_id: int, pagination: Pagination) -> Page[CommentSnapshot]:
        stmt = select(CommentSnapshot).where(CommentSnapshot.comment_id == comment_id)
        return self.paginate_stmt(stmt, pagination)
