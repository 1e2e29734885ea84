"""Keyset pagination tests for :class:`forum.repositories.post.PostRepository`."""

from __future__ import annotations

from datetime import timedelta

import pytest

from forum.models.base import utcnow
from forum.repositories.base import InvalidCursor, decode_cursor, encode_cursor
from forum.repositories.post import POST_SORTS, CommentRepository, PostRepository
from tests.factories.community import CommunityFactory
from tests.factories.post import CommentFactory, PostFactory


@pytest.fixture()
def repo(session) -> PostRepository:
    return PostRepository(session=session)


def _posts(community, count: int, **kwargs):
    """Create ``count`` posts one minute apart, newest first in the result."""
    base = utcnow()
    created = [
        PostFactory(community=community, created_at=base - timedelta(minutes=i), **kwargs)
        for i in range(count)
    ]
    return created


class TestPostFeed:
    def test_newest_pages_cover_every_post_once(self, repo):
        community = CommunityFactory()
        posts = _posts(community, 5)

        first = repo.feed(community_id=community.id, limit=2)
        second = repo.feed(community_id=community.id, cursor=first.next_cursor, limit=2)
        third = repo.feed(community_id=community.id, cursor=second.next_cursor, limit=2)

        seen = [p.id for p in [*first.items, *second.items, *third.items]]
        assert seen == [p.id for p in posts]
        assert first.total == 5
        assert third.next_cursor is None

    def test_top_orders_by_score_then_recency(self, repo):
        community = CommunityFactory()
        base = utcnow()
        low = PostFactory(community=community, score=1, created_at=base)
        high = PostFactory(community=community, score=7, created_at=base - timedelta(hours=1))
        tie_old = PostFactory(community=community, score=3, created_at=base - timedelta(hours=2))
        tie_new = PostFactory(community=community, score=3, created_at=base - timedelta(minutes=5))

        page = repo.feed(sort="top", community_id=community.id, limit=10)

        assert [p.id for p in page.items] == [high.id, tie_new.id, tie_old.id, low.id]

    def test_top_cursor_continues_after_equal_scores(self, repo):
        community = CommunityFactory()
        created_at = utcnow()
        same = [PostFactory(community=community, score=2, created_at=created_at) for _ in range(3)]

        first = repo.feed(sort="top", community_id=community.id, limit=2)
        rest = repo.feed(sort="top", community_id=community.id, cursor=first.next_cursor, limit=2)

        ids = [p.id for p in [*first.items, *rest.items]]
        assert sorted(ids) == sorted(p.id for p in same)
        assert len(set(ids)) == 3

    def test_soft_deleted_posts_are_hidden(self, repo):
        community = CommunityFactory()
        kept, removed = _posts(community, 2)
        removed.mark_deleted()
        repo.flush()

        page = repo.feed(community_id=community.id)

        assert [p.id for p in page.items] == [kept.id]
        assert page.total == 1

    def test_text_filter_matches_title_or_body(self, repo):
        community = CommunityFactory()
        by_title = PostFactory(community=community, title="Saturn rings tonight")
        by_body = PostFactory(community=community, body="Spotted saturn through clouds")
        PostFactory(community=community, title="Unrelated", body="Nothing to see here")

        page = repo.feed(community_id=community.id, q="SATURN")

        assert {p.id for p in page.items} == {by_title.id, by_body.id}

    def test_malformed_cursor_raises(self, repo):
        with pytest.raises(InvalidCursor):
            repo.feed(cursor="not-a-cursor")

    def test_cursor_for_other_ordering_raises(self, repo):
        foreign = encode_cursor([3, "2024-01-01T00:00:00+00:00", 9])
        with pytest.raises(InvalidCursor):
            repo.feed(sort="newest", cursor=foreign)


class TestCursorCodec:
    def test_decode_restores_column_types(self):
        now = utcnow()
        keys = [*POST_SORTS["top"], (PostRepository.model.id, True)]

        values = decode_cursor(encode_cursor([4, now, 12]), keys)

        assert values == [4, now, 12]

    def test_decode_rejects_wrong_types(self):
        keys = [(PostRepository.model.id, True)]
        with pytest.raises(InvalidCursor):
            decode_cursor(encode_cursor(["12"]), keys)
        with pytest.raises(InvalidCursor):
            decode_cursor(encode_cursor([True]), keys)


class TestCommentThreads:
    def test_top_level_excludes_replies(self, session):
        repo = CommentRepository(session=session)
        post = PostFactory()
        root = CommentFactory(post=post)
        CommentFactory(post=post, parent_id=root.id, depth=2)

        page = repo.top_level(post.id)

        assert [c.id for c in page.items] == [root.id]

    def test_replies_are_oldest_first(self, session):
        repo = CommentRepository(session=session)
        post = PostFactory()
        root = CommentFactory(post=post)
        base = utcnow()
        later = CommentFactory(post=post, parent_id=root.id, depth=2, created_at=base)
        earlier = CommentFactory(
            post=post, parent_id=root.id, depth=2, created_at=base - timedelta(minutes=1)
        )

        page = repo.replies(root.id)

        assert [c.id for c in page.items] == [earlier.id, later.id]

    def test_sum_comments_counts_live_rows(self, session, repo):
        post = PostFactory()
        CommentFactory(post=post)
        gone = CommentFactory(post=post)
        gone.mark_deleted()
        session.flush()

        assert repo.sum_comments(post.id) == 1


class TestParentVisibility:
    def test_posts_of_deleted_community_are_hidden(self, session, repo):
        gone = CommunityFactory()
        kept = PostFactory()
        hidden = PostFactory(community=gone)
        gone.mark_deleted()
        session.flush()

        assert [p.id for p in repo.feed().items] == [kept.id]
        assert [p.id for p in repo.latest()] == [kept.id]
        assert repo.get_visible(hidden.id) is None
        assert repo.get_visible(kept.id) is not None

    def test_comments_of_deleted_post_are_hidden(self, session):
        comments = CommentRepository(session=session)
        dead_post = PostFactory()
        orphan = CommentFactory(post=dead_post, content="hello from a deleted post")
        alive = CommentFactory(content="hello from a live post")
        dead_post.mark_deleted()
        session.flush()

        assert [c.id for c in comments.search("hello").items] == [alive.id]
        assert comments.get_visible(orphan.id) is None
        assert comments.get_visible(alive.id) is not None

    def test_comments_of_deleted_community_are_hidden(self, session):
        comments = CommentRepository(session=session)
        comment = CommentFactory(content="hello again")
        comment.post.community.mark_deleted()
        session.flush()

        assert comments.search("hello").items == []
        assert comments.get_visible(comment.id) is None
