"""Demo data for local development: accounts, communities and a few threads.

Every seeder looks rows up by their natural key before inserting, so running
the seeds twice leaves the database unchanged and reports ``kept`` rows.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from typing import Any, TypeVar, cast

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from forum.models.community import (
    Community,
    CommunityCategory,
    CommunityMembership,
    CommunityRule,
    ReservedTerm,
    name_key_for,
)
from forum.models.post import Comment, Post
from forum.models.user import User, UserRole
from forum.models.vote import CommentVote, PostVote

LOGGER = logging.getLogger(__name__)

M = TypeVar("M")
Summary = dict[str, dict[str, int]]

RESERVED_TERMS = ("admin", "administrator", "moderator", "support", "staff", "official")

# Keyed by username; other fixtures refer to people by these keys.
USER_FIXTURES: dict[str, dict[str, Any]] = {
    "ada": {
        "email": "ada@forum.test",
        "display_name": "Ada",
        "password": "analytical-1843",
        "role": UserRole.ADMIN,
    },
    "grace": {"email": "grace@forum.test", "display_name": "Grace H.", "password": "compiler-1952"},
    "linus": {"email": "linus@forum.test", "display_name": None, "password": "kernel-1991!"},
    "vera": {"email": "vera@forum.test", "display_name": "Vera", "password": "rotation-curve"},
}

COMMUNITY_FIXTURES: list[dict[str, Any]] = [
    {
        "name": "python",
        "owner": "ada",
        "category": CommunityCategory.TECH_PROGRAMMING,
        "description": "News, questions and show-and-tell for Python developers.",
        "rules": ["Be kind to beginners", "No low-effort screenshots", "Use code blocks"],
        "members": ["grace", "linus"],
    },
    {
        "name": "Astronomy",
        "owner": "linus",
        "category": CommunityCategory.SCIENCE,
        "description": "Observations, astrophotography and space news.",
        "rules": ["Credit your photos", "Cite sources for news"],
        "members": ["vera"],
    },
    {
        "name": "board-games",
        "owner": "vera",
        "category": CommunityCategory.GAMES,
        "description": None,
        "rules": [],
        "members": ["ada", "grace"],
    },
]

POST_FIXTURES: list[dict[str, Any]] = [
    {
        "community": "python",
        "author": "grace",
        "title": "What changed in the latest release?",
        "body": "Curious which features people are actually using day to day.",
        "comments": [
            ("linus", "Pattern matching, mostly for parsing configs."),
            ("ada", "The improved error messages save me hours."),
        ],
        "votes": {"linus": 1, "ada": 1},
    },
    {
        "community": "python",
        "author": "linus",
        "title": "Packaging tips for small libraries",
        "body": "A short checklist I use before publishing a package to the index.",
        "comments": [("grace", "Great list, bookmarking this.")],
        "votes": {"grace": 1, "vera": -1},
    },
    {
        "community": "astronomy",
        "author": "vera",
        "title": "First photo of Saturn",
        "body": "Taken with a small refractor from my balcony last night.",
        "comments": [],
        "votes": {"linus": 1},
    },
]


class _Tally:
    """Per-table ``created``/``existing`` counters."""

    def __init__(self) -> None:
        self._counts: dict[str, dict[str, int]] = defaultdict(lambda: {"created": 0, "existing": 0})

    def record(self, table: str, created: bool) -> None:
        self._counts[table]["created" if created else "existing"] += 1

    def merge(self, other: Summary) -> None:
        for table, counters in other.items():
            for key in ("created", "existing"):
                self._counts[table][key] += counters.get(key, 0)

    def as_dict(self) -> Summary:
        return {table: dict(counters) for table, counters in self._counts.items()}


def _ensure(
    session: Session,
    model: type[M],
    *,
    defaults: dict[str, Any] | None = None,
    **key: Any,
) -> tuple[M, bool]:
    """Row of ``model`` matching ``key``, inserted with ``defaults`` when missing."""
    row = session.execute(select(model).filter_by(**key)).scalar_one_or_none()
    if row is not None:
        return row, False
    row = cast(M, model(**{**(defaults or {}), **key}))
    session.add(row)
    return row, True


def _people(session: Session) -> dict[str, User]:
    rows = session.execute(select(User).where(User.username_key.in_(list(USER_FIXTURES)))).scalars()
    return {user.username_key: user for user in rows}


def seed_users(database: SQLAlchemy, *, verbose: bool = False) -> Summary:
    """Reserved community names and the demo accounts."""
    if verbose:
        LOGGER.info("Seeding reserved terms and users...")
    session = cast(Session, database.session)
    tally = _Tally()

    with session.begin():
        for term in RESERVED_TERMS:
            _, created = _ensure(session, ReservedTerm, term_key=term, defaults={"term": term})
            tally.record("reserved_terms", created)

        for username, fixture in USER_FIXTURES.items():
            user = session.execute(select(User).filter_by(email=fixture["email"])).scalar_one_or_none()
            created = user is None
            if user is None:
                user = User(email=fixture["email"], username=username)
                user.password = fixture["password"]
                session.add(user)
            user.display_name = fixture["display_name"]
            user.role = fixture.get("role", UserRole.MEMBER)
            session.flush()
            tally.record("users", created)

    return tally.as_dict()


def _live_members(session: Session, community_id: int) -> int:
    return session.execute(
        select(func.count())
        .select_from(CommunityMembership)
        .where(
            CommunityMembership.community_id == community_id,
            CommunityMembership.deleted_at.is_(None),
        )
    ).scalar_one()


def seed_communities(database: SQLAlchemy, *, verbose: bool = False) -> Summary:
    """Communities with their rules; owners and listed members join them."""
    if verbose:
        LOGGER.info("Seeding communities...")
    session = cast(Session, database.session)
    tally = _Tally()

    with session.begin():
        people = _people(session)
        for fixture in COMMUNITY_FIXTURES:
            community, created = _ensure(
                session,
                Community,
                name_key=name_key_for(fixture["name"]),
                defaults={
                    "name": fixture["name"],
                    "owner_id": people[fixture["owner"]].id,
                    "category": fixture["category"],
                    "description": fixture["description"],
                },
            )
            session.flush()
            tally.record("communities", created)

            for order_index, text in enumerate(fixture["rules"], start=1):
                _, created = _ensure(
                    session,
                    CommunityRule,
                    community_id=community.id,
                    order_index=order_index,
                    defaults={"text": text},
                )
                tally.record("community_rules", created)

            for username in (fixture["owner"], *fixture["members"]):
                _, created = _ensure(
                    session,
                    CommunityMembership,
                    community_id=community.id,
                    user_id=people[username].id,
                )
                tally.record("community_memberships", created)
            session.flush()
            community.member_count = _live_members(session, community.id)

    return tally.as_dict()


def _post_score(session: Session, post_id: int) -> int:
    return session.execute(
        select(func.coalesce(func.sum(PostVote.value), 0)).where(PostVote.post_id == post_id)
    ).scalar_one()


def _comment_score(session: Session, comment_id: int) -> int:
    return session.execute(
        select(func.coalesce(func.sum(CommentVote.value), 0)).where(CommentVote.comment_id == comment_id)
    ).scalar_one()


def _live_comments(session: Session, post_id: int) -> int:
    return session.execute(
        select(func.count())
        .select_from(Comment)
        .where(Comment.post_id == post_id, Comment.deleted_at.is_(None))
    ).scalar_one()


def seed_posts(database: SQLAlchemy, *, verbose: bool = False) -> Summary:
    """Posts with top-level comments and votes; stored scores and counts are recomputed."""
    if verbose:
        LOGGER.info("Seeding posts, comments and votes...")
    session = cast(Session, database.session)
    tally = _Tally()

    with session.begin():
        people = _people(session)
        for fixture in POST_FIXTURES:
            community = session.execute(
                select(Community).filter_by(name_key=name_key_for(fixture["community"]))
            ).scalar_one()
            post, created = _ensure(
                session,
                Post,
                community_id=community.id,
                title=fixture["title"],
                defaults={"author_id": people[fixture["author"]].id, "body": fixture["body"]},
            )
            session.flush()
            tally.record("posts", created)

            for username, content in fixture["comments"]:
                _, created = _ensure(
                    session,
                    Comment,
                    post_id=post.id,
                    author_id=people[username].id,
                    content=content,
                    defaults={"depth": 1},
                )
                tally.record("comments", created)

            for username, value in fixture["votes"].items():
                vote, created = _ensure(
                    session,
                    PostVote,
                    post_id=post.id,
                    user_id=people[username].id,
                    defaults={"value": value},
                )
                vote.value = value
                tally.record("post_votes", created)
            session.flush()
            post.score = _post_score(session, post.id)
            post.comment_count = _live_comments(session, post.id)

        # One upvote on the oldest comment so comment scores are not all zero.
        oldest = session.execute(select(Comment).order_by(Comment.id).limit(1)).scalar_one_or_none()
        voter = people["grace"]
        if oldest is not None and oldest.author_id != voter.id:
            _, created = _ensure(
                session,
                CommentVote,
                comment_id=oldest.id,
                user_id=voter.id,
                defaults={"value": 1},
            )
            tally.record("comment_votes", created)
            session.flush()
            oldest.score = _comment_score(session, oldest.id)

    return tally.as_dict()


# Stage name -> seeder, in foreign-key order.
SEEDERS = {
    "users": seed_users,
    "communities": seed_communities,
    "posts": seed_posts,
}


def run_all(
    database: SQLAlchemy,
    *,
    stages: Iterable[str] | None = None,
    verbose: bool = False,
) -> Summary:
    """
    Run the requested seed stages (all of them by default) in dependency order.

    Later stages look up the rows created by earlier ones, so selecting
    ``posts`` alone only works against a database that already holds the
    demo users and communities.
    """
    wanted = set(stages or SEEDERS)
    unknown = wanted - SEEDERS.keys()
    if unknown:
        raise ValueError(f"Unknown seed stage(s): {', '.join(sorted(unknown))}")

    tally = _Tally()
    for name, seeder in SEEDERS.items():
        if name in wanted:
            if verbose:
                LOGGER.info("Running seed stage %r", name)
            tally.merge(seeder(database, verbose=verbose))
    return tally.as_dict()


__all__ = [
    "SEEDERS",
    "run_all",
    "seed_communities",
    "seed_posts",
    "seed_users",
]
