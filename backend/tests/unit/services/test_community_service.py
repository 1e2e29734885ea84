from __future__ import annotations

import pytest

from forum.models.community import CommunityCategory, CommunityMembership
from forum.models.moderation import RestrictionType
from forum.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from forum.services.communities import (
    CommunityCommandService,
    CommunityQueryService,
    CommunityRuleService,
    MembershipService,
)
from forum.services.communities.dto import (
    CommunityCreateIn,
    CommunitySearchIn,
    CommunityUpdateIn,
    RuleCreateIn,
    RuleIn,
    RuleListIn,
    RuleUpdateIn,
)
from tests.factories.community import (
    CommunityFactory,
    CommunityRuleFactory,
    ReservedTermFactory,
)
from tests.factories.moderation import UserRestrictionFactory
from tests.factories.user import UserFactory
from tests.helpers.auth import guest_ctx, member_ctx


@pytest.fixture()
def owner(session):
    user = UserFactory()
    session.commit()
    return user


def _create(owner, name: str = "python", **kwargs):
    service = CommunityCommandService(ctx=member_ctx(owner))
    return service.create(CommunityCreateIn(name=name, category="Tech & Programming", **kwargs))


# ------------------------------ Create ------------------------------------- #
def test_create_makes_owner_first_member(owner, session):
    out = _create(
        owner,
        name="Python",
        description="All things Python",
        rules=[RuleIn(order_index=2, text="Be kind"), RuleIn(order_index=1, text="Stay on topic")],
    )

    assert out.name == "Python"
    assert out.member_count == 1
    assert out.joined is True
    assert [r.text for r in out.rules] == ["Stay on topic", "Be kind"]
    membership = session.query(CommunityMembership).filter_by(community_id=out.id).one()
    assert membership.user_id == owner.id

    recent = CommunityQueryService(ctx=member_ctx(owner)).recent()
    assert [r.community.id for r in recent] == [out.id]


def test_create_rejects_taken_name_in_any_case(owner):
    _create(owner, name="Python")

    with pytest.raises(ConflictError):
        _create(owner, name="PYTHON")


def test_create_rejects_reserved_term(owner, session):
    ReservedTermFactory(term="Support")
    session.commit()

    with pytest.raises(ConflictError) as exc:
        _create(owner, name="support")
    assert "reserved" in str(exc.value)


def test_create_validates_category_and_rules(owner):
    service = CommunityCommandService(ctx=member_ctx(owner))
    with pytest.raises(ValidationError) as exc:
        service.create(CommunityCreateIn(name="gardening", category="Plants"))
    assert exc.value.code == "invalid_category"

    with pytest.raises(ValidationError) as exc:
        _create(owner, name="gardening", rules=[RuleIn(1, "a rule"), RuleIn(1, "same index")])
    assert exc.value.code == "duplicate_rule_order"

    with pytest.raises(ValidationError):
        _create(owner, name="gardening", rules=[RuleIn(i, f"rule {i}") for i in range(1, 22)])


def test_create_requires_member(session):
    with pytest.raises(AuthenticationError):
        CommunityCommandService().create(CommunityCreateIn(name="nobody", category="Games"))
    with pytest.raises(AuthorizationError) as exc:
        CommunityCommandService(ctx=guest_ctx()).create(CommunityCreateIn(name="guests", category="Games"))
    assert exc.value.code == "guest_forbidden"


def test_restricted_member_cannot_create(owner, session):
    UserRestrictionFactory(user=owner, restriction_type=RestrictionType.READ_ONLY)
    session.commit()

    with pytest.raises(AuthorizationError) as exc:
        _create(owner, name="blocked")
    assert exc.value.code == "account_restricted"


# ------------------------------ Update / delete ---------------------------- #
def test_only_owner_updates_and_deletes(owner, session):
    _create(owner, name="astro")
    intruder = UserFactory()
    session.commit()

    with pytest.raises(AuthorizationError):
        CommunityCommandService(ctx=member_ctx(intruder)).update(
            CommunityUpdateIn(name="astro", description="hijacked")
        )
    with pytest.raises(AuthorizationError):
        CommunityCommandService(ctx=member_ctx(intruder)).delete("astro")

    out = CommunityCommandService(ctx=member_ctx(owner)).update(
        CommunityUpdateIn(name="ASTRO", description="Stars", category="Science")
    )
    assert out.description == "Stars"
    assert out.category == "Science"

    CommunityCommandService(ctx=member_ctx(owner)).delete("astro")
    with pytest.raises(NotFoundError):
        CommunityQueryService().get("astro")


def test_deleted_name_stays_taken(owner):
    _create(owner, name="phoenix")
    CommunityCommandService(ctx=member_ctx(owner)).delete("phoenix")

    with pytest.raises(ConflictError):
        _create(owner, name="Phoenix")


# ------------------------------ Membership --------------------------------- #
def test_join_and_leave_keep_member_count_in_sync(owner, session):
    _create(owner, name="chess")
    fan = UserFactory()
    session.commit()
    membership = MembershipService(ctx=member_ctx(fan))

    joined = membership.set_membership("chess", join=True)
    assert joined.joined is True
    assert joined.member_count == 2

    again = membership.set_membership("Chess", join=True)
    assert again.member_count == 2

    membership.leave("chess")
    left = membership.set_membership("chess", join=False)
    assert left.joined is False
    assert left.member_count == 1
    assert left.joined_at is None

    rejoined = membership.set_membership("chess", join=True)
    assert rejoined.member_count == 2
    rows = session.query(CommunityMembership).filter_by(user_id=fan.id).all()
    assert len(rows) == 1


def test_only_joining_marks_community_recent(owner, session):
    _create(owner, name="knitting")
    _create(owner, name="pottery")
    fan = UserFactory()
    session.commit()
    membership = MembershipService(ctx=member_ctx(fan))
    recents = CommunityQueryService(ctx=member_ctx(fan))

    membership.set_membership("pottery", join=False)
    membership.leave("knitting")
    assert recents.recent() == []

    membership.set_membership("knitting", join=True)
    membership.set_membership("knitting", join=False)
    assert [r.community.name for r in recents.recent()] == ["knitting"]


def test_membership_visible_in_queries(owner, session):
    _create(owner, name="cycling")
    fan = UserFactory()
    session.commit()
    MembershipService(ctx=member_ctx(fan)).set_membership("cycling", join=True)

    assert CommunityQueryService(ctx=member_ctx(fan)).get("cycling").joined is True
    assert CommunityQueryService().get("cycling").joined is None

    members = CommunityQueryService().members("cycling")
    assert {m.user.id for m in members.items} == {owner.id, fan.id}

    mine = CommunityQueryService(ctx=member_ctx(fan)).joined_by(fan.id)
    assert [c.name for c in mine.items] == ["cycling"]
    with pytest.raises(AuthorizationError):
        CommunityQueryService(ctx=member_ctx(owner)).joined_by(fan.id)


def test_join_unknown_community(owner):
    with pytest.raises(NotFoundError):
        MembershipService(ctx=member_ctx(owner)).set_membership("nowhere", join=True)


# ------------------------------ Search ------------------------------------- #
def test_search_filters_and_sorts(session):
    CommunityFactory(name="beta-club", category=CommunityCategory.GAMES)
    CommunityFactory(name="alpha-club", category=CommunityCategory.GAMES)
    CommunityFactory(name="alpha-science", category=CommunityCategory.SCIENCE)
    session.commit()

    out = CommunityQueryService().search(CommunitySearchIn(q="club", category="Games"))

    assert [c.name for c in out.items] == ["alpha-club", "beta-club"]
    assert out.meta.total == 2

    with pytest.raises(ValidationError):
        CommunityQueryService().search(CommunitySearchIn(category="Knitting"))


# ------------------------------ Rules -------------------------------------- #
def test_rule_crud_is_owner_only(owner, session):
    _create(owner, name="rules-lab", rules=[RuleIn(1, "First rule")])
    intruder = UserFactory()
    session.commit()
    rules = CommunityRuleService(ctx=member_ctx(owner))

    created = rules.create(RuleCreateIn(name="rules-lab", order_index=2, text="Second rule"))
    assert created.order_index == 2

    with pytest.raises(ConflictError):
        rules.create(RuleCreateIn(name="rules-lab", order_index=2, text="Duplicate order"))
    with pytest.raises(AuthorizationError):
        CommunityRuleService(ctx=member_ctx(intruder)).create(
            RuleCreateIn(name="rules-lab", order_index=3, text="Not yours")
        )

    updated = rules.update(RuleUpdateIn(name="rules-lab", rule_id=created.id, order_index=5, text="Moved"))
    assert (updated.order_index, updated.text) == (5, "Moved")

    rules.delete("rules-lab", created.id)
    with pytest.raises(NotFoundError):
        rules.get("rules-lab", created.id)


def test_rule_listing_pages_with_cursor(session):
    community = CommunityFactory(name="paged-rules")
    for i in range(1, 6):
        CommunityRuleFactory(community=community, order_index=i, text=f"Rule {i}")
    session.commit()
    service = CommunityRuleService()

    first = service.list(RuleListIn(name="paged-rules", limit=2))
    second = service.list(RuleListIn(name="paged-rules", cursor=first.meta.next_cursor, limit=2))

    assert [r.order_index for r in first.items] == [1, 2]
    assert [r.order_index for r in second.items] == [3, 4]
    assert first.meta.total == 5

    filtered = service.list(RuleListIn(name="paged-rules", q="rule 5"))
    assert [r.order_index for r in filtered.items] == [5]

    with pytest.raises(ValidationError) as exc:
        service.list(RuleListIn(name="paged-rules", cursor="%%%"))
    assert exc.value.code == "invalid_cursor"
    with pytest.raises(ValidationError):
        service.list(RuleListIn(name="paged-rules", sort="text"))
