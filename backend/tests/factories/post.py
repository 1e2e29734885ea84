"""Factory Boy definitions for posts and comments."""

from __future__ import annotations

import factory

from forum.models.post import Comment, Post
from tests.factories import BaseFactory
from tests.factories.community import CommunityFactory
from tests.factories.user import UserFactory


class PostFactory(BaseFactory):
    """Persisted :class:`Post` with a zero score and no comments."""

    class Meta:
        model = Post

    community = factory.SubFactory(CommunityFactory)
    author = factory.SubFactory(UserFactory)
    community_id = factory.SelfAttribute("community.id")
    author_id = factory.SelfAttribute("author.id")
    title = factory.Sequence(lambda n: f"Post title {n}")
    body = factory.Faker("paragraph", nb_sentences=2)
    score = 0
    comment_count = 0


class CommentFactory(BaseFactory):
    """Top-level comment by default; pass ``parent`` and ``depth`` for replies."""

    class Meta:
        model = Comment

    post = factory.SubFactory(PostFactory)
    author = factory.SubFactory(UserFactory)
    post_id = factory.SelfAttribute("post.id")
    author_id = factory.SelfAttribute("author.id")
    parent_id = None
    content = factory.Faker("sentence", nb_words=6)
    depth = 1
    score = 0
