from __future__ import annotations

import pytest

from forum.models.moderation import RestrictionType
from forum.models.post import Comment, Post
from forum.models.vote import PostVote
from forum.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from forum.services.votes import VoteIn, VoteService
from tests.factories.moderation import UserRestrictionFactory
from tests.factories.post import CommentFactory, PostFactory
from tests.factories.user import UserFactory
from tests.factories.vote import PostVoteFactory
from tests.helpers.auth import guest_ctx, member_ctx


@pytest.fixture()
def voter(session):
    user = UserFactory()
    session.commit()
    return user


@pytest.fixture()
def post(session):
    row = PostFactory()
    session.commit()
    return row


def test_switching_vote_moves_score_by_two(voter, post, session):
    service = VoteService(ctx=member_ctx(voter))

    up = service.set_post_vote(VoteIn(target_id=post.id, state="upvote"))
    assert (up.score, up.my_vote) == (1, "upvote")

    down = service.set_post_vote(VoteIn(target_id=post.id, state="downvote"))
    assert (down.score, down.my_vote) == (-1, "downvote")
    assert session.query(PostVote).filter_by(post_id=post.id).count() == 1


def test_repeating_a_vote_is_a_no_op(voter, post):
    service = VoteService(ctx=member_ctx(voter))

    service.set_post_vote(VoteIn(target_id=post.id, state="upvote"))
    again = service.set_post_vote(VoteIn(target_id=post.id, state="upvote"))

    assert again.score == 1


def test_score_is_the_sum_of_all_votes(voter, post, session):
    PostVoteFactory(post=post, value=1)
    PostVoteFactory(post=post, value=1)
    session.commit()

    out = VoteService(ctx=member_ctx(voter)).set_post_vote(VoteIn(target_id=post.id, state="downvote"))

    assert out.score == 1
    assert session.get(Post, post.id).score == 1


def test_clear_removes_vote_and_is_idempotent(voter, post, session):
    service = VoteService(ctx=member_ctx(voter))
    service.set_post_vote(VoteIn(target_id=post.id, state="upvote"))

    cleared = service.clear_post_vote(post.id)
    assert (cleared.score, cleared.my_vote) == (0, "none")

    # Clearing an absent vote is a no-op, not an error.
    service.clear_post_vote(post.id)
    service.set_post_vote(VoteIn(target_id=post.id, state="none"))
    assert session.query(PostVote).filter_by(post_id=post.id).count() == 0


def test_self_vote_is_forbidden(session):
    author = UserFactory()
    own = PostFactory(author=author)
    session.commit()

    with pytest.raises(AuthorizationError) as exc:
        VoteService(ctx=member_ctx(author)).set_post_vote(VoteIn(target_id=own.id, state="upvote"))
    assert exc.value.code == "self_vote_forbidden"


def test_callers_who_cannot_vote(voter, post, session):
    with pytest.raises(AuthenticationError):
        VoteService().set_post_vote(VoteIn(target_id=post.id, state="upvote"))
    with pytest.raises(AuthorizationError) as exc:
        VoteService(ctx=guest_ctx()).set_post_vote(VoteIn(target_id=post.id, state="upvote"))
    assert exc.value.code == "guest_forbidden"

    UserRestrictionFactory(user=voter, restriction_type=RestrictionType.READ_ONLY)
    session.commit()
    with pytest.raises(AuthorizationError) as exc:
        VoteService(ctx=member_ctx(voter)).set_post_vote(VoteIn(target_id=post.id, state="upvote"))
    assert exc.value.code == "account_restricted"


def test_invalid_state_and_missing_targets(voter, post, session):
    service = VoteService(ctx=member_ctx(voter))
    with pytest.raises(ValidationError) as exc:
        service.set_post_vote(VoteIn(target_id=post.id, state="sideways"))
    assert exc.value.code == "invalid_vote_state"

    with pytest.raises(NotFoundError):
        service.set_post_vote(VoteIn(target_id=999_999, state="upvote"))

    post.mark_deleted()
    session.commit()
    with pytest.raises(NotFoundError):
        service.set_post_vote(VoteIn(target_id=post.id, state="upvote"))


def test_comment_votes(voter, session):
    comment = CommentFactory()
    session.commit()
    service = VoteService(ctx=member_ctx(voter))

    out = service.set_comment_vote(VoteIn(target_id=comment.id, state="downvote"))
    assert (out.comment_id, out.score, out.my_vote) == (comment.id, -1, "downvote")

    cleared = service.clear_comment_vote(comment.id)
    assert cleared.score == 0
    assert session.get(Comment, comment.id).score == 0
