from __future__ import annotations

import logging

from forum.models.post import Comment, CommentSnapshot
from forum.models.vote import VoteState
from forum.repositories.post import COMMENT_SORTS, CommentRepository
from forum.services._shared.base import BaseService
from forum.services._shared.dto import PageMeta
from forum.services._shared.errors import NotFoundError, ValidationError
from forum.services._shared.policies.moderation import ensure_can_write
from forum.services.posts._converters import my_vote_label
from forum.services.posts.query import normalize_query

from ._converters import comment_snapshot_to_out, comment_to_out
from .dto import (
    CommentCreateIn,
    CommentListIn,
    CommentListOut,
    CommentOut,
    CommentSnapshotListOut,
    CommentUpdateIn,
)

logger = logging.getLogger(__name__)

MAX_COMMENT_DEPTH = 8


class CommentService(BaseService):
    """
    Threaded comments on posts.

    Top-level comments have ``depth`` 1 and each reply is one level deeper
    than its parent, up to :data:`MAX_COMMENT_DEPTH`. ``post.comment_count``
    is recounted from the live comments after every create or delete.
    """

    # ------------------------------ Writes --------------------------------

    def create(self, dto: CommentCreateIn) -> CommentOut:
        """
        Comment on a post, optionally replying to another comment.

        :raises NotFoundError: Unknown or deleted post.
        :raises ValidationError: ``invalid_parent`` or ``max_depth_exceeded``.
        """
        actor_id = self.require_actor()
        with self.rw_uow() as uow:
            ensure_can_write(uow.restrictions, actor_id, self.now())
            post = uow.posts.get_visible(dto.post_id)
            if post is None:
                raise NotFoundError("Post", dto.post_id)

            repo: CommentRepository = uow.comments
            depth = 1
            if dto.parent_id is not None:
                parent = repo.get_visible(dto.parent_id)
                if parent is None or parent.post_id != post.id:
                    raise ValidationError(
                        "Parent comment must be a live comment of the same post.",
                        code="invalid_parent",
                    )
                depth = parent.depth + 1
                if depth > MAX_COMMENT_DEPTH:
                    raise ValidationError(
                        f"Replies cannot be nested deeper than {MAX_COMMENT_DEPTH} levels.",
                        code="max_depth_exceeded",
                    )

            comment = repo.add(
                Comment(
                    post_id=post.id,
                    author_id=actor_id,
                    parent_id=dto.parent_id,
                    content=dto.content,
                    depth=depth,
                    score=0,
                )
            )
            post.comment_count = uow.posts.sum_comments(post.id)
            repo.flush()

            logger.info(
                "Comment created",
                extra={"comment_id": comment.id, "post_id": post.id, "depth": depth},
            )
            return comment_to_out(comment, my_vote=VoteState.NONE.value)

    def update(self, dto: CommentUpdateIn) -> CommentOut:
        """Edit a comment (author only) after snapshotting its previous content."""
        actor_id = self.require_actor()
        with self.rw_uow() as uow:
            repo: CommentRepository = uow.comments
            comment = repo.get_for_update(dto.comment_id)
            if comment is None or comment.is_deleted:
                raise NotFoundError("Comment", dto.comment_id)
            self.ensure_owner(actor_id, comment.author_id, msg="Only the author can edit this comment.")
            self.ensure_if_match(dto.if_match, comment.compute_etag())
            ensure_can_write(uow.restrictions, actor_id, self.now())

            if dto.content != comment.content:
                uow.comment_snapshots.add(
                    CommentSnapshot(comment_id=comment.id, editor_id=actor_id, content=comment.content)
                )
                repo.assign_updates(comment, {"content": dto.content})

            my_votes = uow.comment_votes.values_for_user(actor_id, [comment.id])
            logger.info("Comment updated", extra={"comment_id": comment.id})
            return comment_to_out(comment, my_vote=my_vote_label(my_votes, comment.id))

    def delete(self, comment_id: int) -> None:
        """Soft-delete a comment (author only) and recount the post's comments."""
        actor_id = self.require_actor()
        with self.rw_uow() as uow:
            repo: CommentRepository = uow.comments
            comment = repo.get_for_update(comment_id)
            if comment is None:
                raise NotFoundError("Comment", comment_id)
            self.ensure_owner(actor_id, comment.author_id, msg="Only the author can delete this comment.")
            if comment.is_deleted:
                return
            repo.delete(comment)

            post = uow.posts.get(comment.post_id)
            if post is not None:
                post.comment_count = uow.posts.sum_comments(post.id)
                repo.flush()
            logger.info("Comment deleted", extra={"comment_id": comment_id, "post_id": comment.post_id})

    # ------------------------------ Reads ---------------------------------

    def list_for_post(self, post_id: int, dto: CommentListIn) -> CommentListOut:
        """Top-level comments of a live post."""
        self._check_sort(dto.sort)
        with self.ro_uow() as uow:
            if uow.posts.get_visible(post_id) is None:
                raise NotFoundError("Post", post_id)
            with self.keyset_errors():
                page = uow.comments.top_level(post_id, sort=dto.sort, cursor=dto.cursor, limit=dto.limit)
            return self._list_out(uow, page)

    def replies(self, comment_id: int, dto: CommentListIn) -> CommentListOut:
        """Direct replies of a comment, oldest first."""
        with self.ro_uow() as uow:
            if uow.comments.get_visible(comment_id) is None:
                raise NotFoundError("Comment", comment_id)
            with self.keyset_errors():
                page = uow.comments.replies(comment_id, cursor=dto.cursor, limit=dto.limit)
            return self._list_out(uow, page)

    def search(self, q: str | None, dto: CommentListIn) -> CommentListOut:
        query = normalize_query(q, required=True)
        self._check_sort(dto.sort)
        with self.ro_uow() as uow:
            with self.keyset_errors():
                page = uow.comments.search(query, sort=dto.sort, cursor=dto.cursor, limit=dto.limit)
            return self._list_out(uow, page)

    def get(self, comment_id: int) -> CommentOut:
        with self.ro_uow() as uow:
            comment = uow.comments.get_visible(comment_id)
            if comment is None:
                raise NotFoundError("Comment", comment_id)
            my_votes = self._my_votes(uow, [comment.id])
            return comment_to_out(comment, my_vote=my_vote_label(my_votes, comment.id))

    def history(self, comment_id: int, *, page: int = 1, limit: int = 20) -> CommentSnapshotListOut:
        """Previous contents of a comment, newest first."""
        pagination = self.ensure_pagination(page=page, limit=limit, sort=["-created_at"])
        with self.ro_uow() as uow:
            if uow.comments.get_visible(comment_id) is None:
                raise NotFoundError("Comment", comment_id)
            result = uow.comment_snapshots.page_for_comment(comment_id, pagination)
            return CommentSnapshotListOut(
                items=[comment_snapshot_to_out(s) for s in result.items],
                meta=PageMeta(page=result.page, limit=result.limit, total=result.total),
            )

    # ------------------------------ Helpers -------------------------------

    @staticmethod
    def _check_sort(sort: str) -> None:
        if sort not in COMMENT_SORTS:
            raise ValidationError(f"Unsupported sort: {sort}", code="invalid_sort")

    def _my_votes(self, uow, comment_ids: list[int]) -> dict[int, int] | None:
        if not self.ctx.is_member:
            return None
        return uow.comment_votes.values_for_user(self.ctx.actor_id, comment_ids)

    def _list_out(self, uow, page) -> CommentListOut:
        my_votes = self._my_votes(uow, [c.id for c in page.items])
        return CommentListOut(
            items=[comment_to_out(c, my_vote=my_vote_label(my_votes, c.id)) for c in page.items],
            meta=self.cursor_meta(page),
        )
