"""Tests for the post and comment vote repositories."""

from __future__ import annotations

import pytest

from forum.repositories.vote import CommentVoteRepository, PostVoteRepository
from tests.factories.post import CommentFactory, PostFactory
from tests.factories.user import UserFactory
from tests.factories.vote import CommentVoteFactory, PostVoteFactory


@pytest.fixture()
def post_votes(session) -> PostVoteRepository:
    return PostVoteRepository(session=session)


@pytest.fixture()
def comment_votes(session) -> CommentVoteRepository:
    return CommentVoteRepository(session=session)


class TestPostVoteRepository:
    def test_score_is_sum_of_values(self, post_votes):
        post = PostFactory()
        PostVoteFactory(post=post, value=1)
        PostVoteFactory(post=post, value=1)
        PostVoteFactory(post=post, value=-1)

        assert post_votes.score_for(post.id) == 1
        assert post_votes.score_for(PostFactory().id) == 0

    def test_get_vote_is_per_voter(self, post_votes):
        post = PostFactory()
        voter, bystander = UserFactory(), UserFactory()
        vote = PostVoteFactory(post=post, user=voter, value=-1)

        assert post_votes.get_vote(post.id, voter.id) is vote
        assert post_votes.get_vote(post.id, bystander.id) is None

    def test_values_for_user_maps_only_voted_targets(self, post_votes):
        voter = UserFactory()
        up, down, untouched = PostFactory(), PostFactory(), PostFactory()
        PostVoteFactory(post=up, user=voter, value=1)
        PostVoteFactory(post=down, user=voter, value=-1)
        PostVoteFactory(post=untouched, value=1)

        values = post_votes.values_for_user(voter.id, [up.id, down.id, untouched.id])

        assert values == {up.id: 1, down.id: -1}
        assert post_votes.values_for_user(voter.id, []) == {}


class TestCommentVoteRepository:
    def test_score_and_values(self, comment_votes):
        comment = CommentFactory()
        voter = UserFactory()
        CommentVoteFactory(comment=comment, user=voter, value=-1)
        CommentVoteFactory(comment=comment, value=-1)

        assert comment_votes.score_for(comment.id) == -2
        assert comment_votes.values_for_user(voter.id, [comment.id]) == {comment.id: -1}
        assert comment_votes.get_vote(comment.id, voter.id).value == -1
