"""Factory Boy definitions for post and comment votes."""

from __future__ import annotations

import factory

from forum.models.vote import CommentVote, PostVote
from tests.factories import BaseFactory
from tests.factories.post import CommentFactory, PostFactory
from tests.factories.user import UserFactory


class PostVoteFactory(BaseFactory):
    """Raw vote row; callers keep ``Post.score`` in sync themselves."""

    class Meta:
        model = PostVote
        exclude = ("post", "user")

    post = factory.SubFactory(PostFactory)
    user = factory.SubFactory(UserFactory)
    post_id = factory.SelfAttribute("post.id")
    user_id = factory.SelfAttribute("user.id")
    value = 1


class CommentVoteFactory(BaseFactory):
    class Meta:
        model = CommentVote
        exclude = ("comment", "user")

    comment = factory.SubFactory(CommentFactory)
    user = factory.SubFactory(UserFactory)
    comment_id = factory.SelfAttribute("comment.id")
    user_id = factory.SelfAttribute("user.id")
    value = 1
