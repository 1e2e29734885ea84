from __future__ import annotations

import logging

from forum.models.post import Post, PostSnapshot
from forum.models.vote import VoteState
from forum.repositories.post import PostRepository
from forum.services._shared.base import BaseService
from forum.services._shared.errors import NotFoundError, ValidationError
from forum.services._shared.policies.moderation import ensure_can_write

from ._converters import my_vote_label, post_to_out
from .dto import PostCreateIn, PostOut, PostUpdateIn

logger = logging.getLogger(__name__)


def ensure_plain_text(body: str) -> None:
    """:raises ValidationError: ``invalid_body`` when markup characters are present."""
    if "<" in body or ">" in body:
        raise ValidationError("Post body must be plain text (no '<' or '>').", code="invalid_body")


class PostCommandService(BaseService):
    """Publish, edit and remove posts. Only the author may edit or remove."""

    def create(self, dto: PostCreateIn) -> PostOut:
        """
        Publish a post in a community and mark the community as active.

        :raises NotFoundError: Unknown or deleted community.
        :raises AuthorizationError: Caller is restricted or a guest.
        """
        actor_id = self.require_actor()
        ensure_plain_text(dto.body)

        now = self.now()
        with self.rw_uow() as uow:
            ensure_can_write(uow.restrictions, actor_id, now)
            community = uow.communities.get_by_name(dto.community_name)
            if community is None:
                raise NotFoundError("Community", dto.community_name)

            repo: PostRepository = uow.posts
            post = repo.add(
                Post(
                    community_id=community.id,
                    author_id=actor_id,
                    title=dto.title,
                    body=dto.body,
                    author_display_name=dto.author_display_name,
                    score=0,
                    comment_count=0,
                )
            )
            community.last_active_at = now
            uow.recent_communities.touch(actor_id, community.id, now)

            logger.info("Post created", extra={"post_id": post.id, "community_id": community.id})
            return post_to_out(post, my_vote=VoteState.NONE.value)

    def update(self, dto: PostUpdateIn) -> PostOut:
        """
        Edit a post after storing its previous version as a snapshot.

        :raises PreconditionFailedError: ``if_match`` does not match the current ETag.
        """
        actor_id = self.require_actor()
        if dto.body is not None:
            ensure_plain_text(dto.body)

        with self.rw_uow() as uow:
            repo: PostRepository = uow.posts
            post = repo.get_for_update(dto.post_id)
            if post is None or post.is_deleted:
                raise NotFoundError("Post", dto.post_id)
            self.ensure_owner(actor_id, post.author_id, msg="Only the author can edit this post.")
            self.ensure_if_match(dto.if_match, post.compute_etag())
            ensure_can_write(uow.restrictions, actor_id, self.now())

            updates: dict[str, object] = {}
            if dto.title is not None:
                updates["title"] = dto.title
            if dto.body is not None:
                updates["body"] = dto.body
            if dto.author_display_name is not None:
                updates["author_display_name"] = dto.author_display_name

            if updates:
                uow.post_snapshots.add(
                    PostSnapshot(
                        post_id=post.id,
                        editor_id=actor_id,
                        title=post.title,
                        body=post.body,
                        author_display_name=post.author_display_name,
                    )
                )
                repo.assign_updates(post, updates)

            my_votes = uow.post_votes.values_for_user(actor_id, [post.id])
            logger.info("Post updated", extra={"post_id": post.id, "fields": list(updates)})
            return post_to_out(post, my_vote=my_vote_label(my_votes, post.id))

    def delete(self, post_id: int) -> None:
        """Soft-delete a post; deleting it again is a no-op for the author."""
        actor_id = self.require_actor()
        with self.rw_uow() as uow:
            repo: PostRepository = uow.posts
            post = repo.get_for_update(post_id)
            if post is None:
                raise NotFoundError("Post", post_id)
            self.ensure_owner(actor_id, post.author_id, msg="Only the author can delete this post.")
            if post.is_deleted:
                return
            repo.delete(post)
            logger.info("Post deleted", extra={"post_id": post_id})
