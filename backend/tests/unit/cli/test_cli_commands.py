from __future__ import annotations

from sqlalchemy import func, select

from forum.models.community import Community
from forum.models.post import Post
from forum.models.user import User, UserRole
from tests.factories.user import UserFactory


def test_promote_and_demote(app, session):
    user = UserFactory(email="operator@example.com")
    session.commit()
    runner = app.test_cli_runner()

    promoted = runner.invoke(args=["users", "promote", "Operator@Example.com"])
    assert promoted.exit_code == 0, promoted.output
    assert "is now admin" in promoted.output
    assert session.get(User, user.id).role is UserRole.ADMIN

    demoted = runner.invoke(args=["users", "demote", "operator@example.com"])
    assert demoted.exit_code == 0, demoted.output
    assert session.get(User, user.id).role is UserRole.MEMBER


def test_promote_unknown_email_fails(app, session):
    result = app.test_cli_runner().invoke(args=["users", "promote", "nobody@example.com"])

    assert result.exit_code != 0
    assert "not found" in result.output.lower()


def test_seed_run_is_idempotent(app, session):
    runner = app.test_cli_runner()

    first = runner.invoke(args=["seed", "run"])
    assert first.exit_code == 0, first.output
    counts = _row_counts(session)
    python = session.execute(select(Community).filter_by(name_key="python")).scalar_one()
    assert python.member_count == 3
    # The seeders open their own transactions.
    session.commit()

    second = runner.invoke(args=["seed", "run"])
    assert second.exit_code == 0, second.output
    rows = [line for line in second.output.splitlines() if "new=" in line]
    assert rows
    assert all("new=0 " in line for line in rows)
    assert "0 row(s) inserted" in second.output
    assert _row_counts(session) == counts


def test_seed_run_only_users(app, session):
    result = app.test_cli_runner().invoke(args=["seed", "run", "--only", "users"])

    assert result.exit_code == 0, result.output
    assert "users" in result.output
    assert "communities" not in result.output
    assert session.scalar(select(func.count()).select_from(Community)) == 0
    assert session.scalar(select(func.count()).select_from(User)) > 0


def test_seed_run_rejects_unknown_stage(app, session):
    result = app.test_cli_runner().invoke(args=["seed", "run", "--only", "workouts"])

    assert result.exit_code != 0
    assert "workouts" in result.output


def _row_counts(session) -> tuple[int, ...]:
    return tuple(
        session.scalar(select(func.count()).select_from(model)) for model in (User, Community, Post)
    )
