from __future__ import annotations

import pytest

from forum.models.moderation import RestrictionType
from forum.models.post import Post
from forum.services._shared.errors import (
    AuthorizationError,
    NotFoundError,
    PreconditionFailedError,
    ValidationError,
)
from forum.services.posts import (
    PostCommandService,
    PostCreateIn,
    PostFeedIn,
    PostQueryService,
    PostUpdateIn,
)
from tests.factories.community import CommunityFactory
from tests.factories.moderation import UserRestrictionFactory
from tests.factories.post import PostFactory
from tests.factories.user import UserFactory
from tests.factories.vote import PostVoteFactory
from tests.helpers.auth import guest_ctx, member_ctx


@pytest.fixture()
def author(session):
    user = UserFactory()
    session.commit()
    return user


@pytest.fixture()
def community(session):
    row = CommunityFactory(name="general")
    session.commit()
    return row


def _publish(author, title: str = "Hello world", body: str = "A plain text body.", **kwargs):
    return PostCommandService(ctx=member_ctx(author)).create(
        PostCreateIn(community_name="General", title=title, body=body, **kwargs)
    )


# ------------------------------ Create ------------------------------------- #
def test_create_post(author, community, session):
    out = _publish(author, author_display_name="Pen Name")

    assert out.community.name == "general"
    assert out.author.id == author.id
    assert out.author_display_name == "Pen Name"
    assert (out.score, out.comment_count, out.my_vote) == (0, 0, "none")
    assert out.etag
    assert session.get(Post, out.id).community_id == community.id


def test_create_rejects_markup(author, community):
    with pytest.raises(ValidationError) as exc:
        _publish(author, body="<script>alert(1)</script>")
    assert exc.value.code == "invalid_body"


def test_create_in_unknown_community(author):
    with pytest.raises(NotFoundError):
        _publish(author)


def test_restricted_and_guest_callers_cannot_post(author, community, session):
    with pytest.raises(AuthorizationError) as exc:
        PostCommandService(ctx=guest_ctx()).create(
            PostCreateIn(community_name="general", title="Guest post", body="Nope, not allowed.")
        )
    assert exc.value.code == "guest_forbidden"

    UserRestrictionFactory(user=author, restriction_type=RestrictionType.READ_ONLY)
    session.commit()
    with pytest.raises(AuthorizationError) as exc:
        _publish(author)
    assert exc.value.code == "account_restricted"


# ------------------------------ Update ------------------------------------- #
def test_update_keeps_snapshot_of_previous_version(author, community):
    created = _publish(author, title="First title", body="First body text.")
    service = PostCommandService(ctx=member_ctx(author))

    updated = service.update(
        PostUpdateIn(post_id=created.id, title="Second title", if_match=created.etag)
    )

    assert updated.title == "Second title"
    assert updated.body == "First body text."
    assert updated.etag != created.etag

    history = PostQueryService().history(created.id)
    assert history.meta.total == 1
    snapshot = history.items[0]
    assert (snapshot.title, snapshot.editor_id) == ("First title", author.id)
    assert PostQueryService().history_item(created.id, snapshot.id) == snapshot


def test_update_with_stale_etag_fails(author, community):
    created = _publish(author)
    service = PostCommandService(ctx=member_ctx(author))
    service.update(PostUpdateIn(post_id=created.id, body="Edited body text."))

    with pytest.raises(PreconditionFailedError):
        service.update(PostUpdateIn(post_id=created.id, title="Lost update", if_match=created.etag))

    assert PostQueryService().get(created.id).body == "Edited body text."


def test_only_author_edits_or_deletes(author, community, session):
    created = _publish(author)
    other = UserFactory()
    session.commit()

    with pytest.raises(AuthorizationError):
        PostCommandService(ctx=member_ctx(other)).update(PostUpdateIn(post_id=created.id, title="Mine now"))
    with pytest.raises(AuthorizationError):
        PostCommandService(ctx=member_ctx(other)).delete(created.id)


# ------------------------------ Delete ------------------------------------- #
def test_delete_is_soft_and_idempotent(author, community, session):
    created = _publish(author)
    service = PostCommandService(ctx=member_ctx(author))

    service.delete(created.id)
    service.delete(created.id)

    assert session.get(Post, created.id).is_deleted
    with pytest.raises(NotFoundError):
        PostQueryService().get(created.id)
    with pytest.raises(NotFoundError):
        service.update(PostUpdateIn(post_id=created.id, title="Too late"))


# ------------------------------ Queries ------------------------------------ #
def test_feed_pages_newest_first(author, community, session):
    posts = [PostFactory(community=community, author=author, title=f"Post {i}") for i in range(3)]
    session.commit()
    service = PostQueryService()

    first = service.feed(PostFeedIn(community_name="general", limit=2))
    second = service.feed(PostFeedIn(community_name="general", cursor=first.meta.next_cursor, limit=2))

    ids = [p.id for p in first.items + second.items]
    assert sorted(ids, reverse=True) == ids
    assert set(ids) == {p.id for p in posts}
    assert second.meta.next_cursor is None


def test_feed_validates_input(community):
    service = PostQueryService()
    with pytest.raises(ValidationError) as exc:
        service.feed(PostFeedIn(sort="hot"))
    assert exc.value.code == "invalid_sort"
    with pytest.raises(ValidationError) as exc:
        service.feed(PostFeedIn(q="x"))
    assert exc.value.code == "invalid_query"
    with pytest.raises(ValidationError) as exc:
        service.feed(PostFeedIn(cursor="not-a-cursor"))
    assert exc.value.code == "invalid_cursor"
    with pytest.raises(NotFoundError):
        service.feed(PostFeedIn(community_name="missing"))


def test_search_requires_query(author, community, session):
    PostFactory(community=community, author=author, title="Rust tips", body="Borrow checker notes.")
    PostFactory(community=community, author=author, title="Python tips", body="Generators everywhere.")
    session.commit()

    found = PostQueryService().search(q="python")
    assert [p.title for p in found.items] == ["Python tips"]

    with pytest.raises(ValidationError):
        PostQueryService().search(q="  ")


def test_my_vote_reflects_caller(author, community, session):
    post = PostFactory(community=community, author=author, score=-1)
    voter = UserFactory()
    PostVoteFactory(post=post, user=voter, value=-1)
    session.commit()

    assert PostQueryService(ctx=member_ctx(voter)).get(post.id).my_vote == "downvote"
    assert PostQueryService(ctx=member_ctx(author)).get(post.id).my_vote == "none"
    assert PostQueryService(ctx=guest_ctx()).get(post.id).my_vote is None
    assert PostQueryService().latest()[0].my_vote is None
