"""
Units of work over Flask-SQLAlchemy's scoped session.
"""

from __future__ import annotations

from contextlib import suppress
from typing import Any

from flask import current_app
from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction

from forum.core.extensions import db
from forum.repositories import (
    CommentRepository,
    CommentSnapshotRepository,
    CommentVoteRepository,
    CommunityMembershipRepository,
    CommunityRepository,
    CommunityRuleRepository,
    GuestVisitorRepository,
    PostRepository,
    PostSnapshotRepository,
    PostVoteRepository,
    RecentCommunityRepository,
    ReservedTermRepository,
    UserRepository,
    UserRestrictionRepository,
    UserSessionRepository,
)
from forum.uow.base import UnitOfWork

# Statements a read-only scope refuses, matched on their first keyword.
WRITE_KEYWORDS = frozenset(
    {
        "insert",
        "update",
        "delete",
        "merge",
        "upsert",
        "alter",
        "drop",
        "truncate",
        "create",
        "replace",
        "grant",
        "revoke",
    }
)
ISOLATION_LEVELS = frozenset({"READ UNCOMMITTED", "READ COMMITTED", "REPEATABLE READ", "SERIALIZABLE"})
# Dialects accepting ``SET TRANSACTION`` at the start of a transaction.
SET_TRANSACTION_DIALECTS = frozenset({"postgresql", "mysql", "mariadb"})


def _bind_repositories(uow: Any, session: Session) -> None:
    uow.session = session
    uow.users = UserRepository(session=session)
    uow.sessions = UserSessionRepository(session=session)
    uow.guests = GuestVisitorRepository(session=session)
    uow.communities = CommunityRepository(session=session)
    uow.memberships = CommunityMembershipRepository(session=session)
    uow.recent_communities = RecentCommunityRepository(session=session)
    uow.rules = CommunityRuleRepository(session=session)
    uow.reserved_terms = ReservedTermRepository(session=session)
    uow.posts = PostRepository(session=session)
    uow.post_snapshots = PostSnapshotRepository(session=session)
    uow.comments = CommentRepository(session=session)
    uow.comment_snapshots = CommentSnapshotRepository(session=session)
    uow.post_votes = PostVoteRepository(session=session)
    uow.comment_votes = CommentVoteRepository(session=session)
    uow.restrictions = UserRestrictionRepository(session=session)


class SQLAlchemyUnitOfWork(UnitOfWork):
    """
    Read-write scope: commits when the block exits cleanly, rolls back when
    it raises (including when the commit itself fails).
    """

    def __init__(self) -> None:
        _bind_repositories(self, db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except Exception:
            self.rollback()
            raise

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class _WriteGuard:
    """Session and connection listeners that turn any write into ``RuntimeError``."""

    def __init__(self, session: Session, connection: Connection) -> None:
        self.session = session
        self.connection = connection

    def _before_flush(self, session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError("Read-only UnitOfWork: ORM flush blocked (pending changes).")

    def _before_cursor_execute(self, conn, cursor, statement, parameters, context, executemany):
        keyword = statement.lstrip().split(None, 1)[0].lower() if statement else ""
        if keyword in WRITE_KEYWORDS:
            raise RuntimeError(f"Read-only UnitOfWork: SQL statement blocked: {keyword.upper()}")

    def __enter__(self) -> _WriteGuard:
        event.listen(self.session, "before_flush", self._before_flush)
        event.listen(self.connection, "before_cursor_execute", self._before_cursor_execute)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        with suppress(InvalidRequestError):
            event.remove(self.session, "before_flush", self._before_flush)
        with suppress(InvalidRequestError):
            event.remove(self.connection, "before_cursor_execute", self._before_cursor_execute)


class SQLAlchemyReadOnlyUnitOfWork(UnitOfWork):
    """
    Read-only scope used by every query service.

    If no transaction is running it opens one and, on PostgreSQL or MySQL,
    applies the isolation level and ``SET TRANSACTION READ ONLY``. Inside an
    already running transaction (an enclosing scope or a test SAVEPOINT) it
    only installs the write guards. Either way ``commit()`` is refused and
    whatever the scope opened is rolled back on exit.

    :param isolation_level: e.g. ``"REPEATABLE READ"``; ``None`` keeps the default.
    :param enforce_db_readonly: Also ask the database for a read-only transaction.
    """

    def __init__(
        self,
        *,
        isolation_level: str | None = "READ COMMITTED",
        enforce_db_readonly: bool = True,
    ) -> None:
        _bind_repositories(self, db.session)
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly
        self._owned: SessionTransaction | None = None
        self._guard: _WriteGuard | None = None

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        try:
            transaction = self.session.begin()
        except InvalidRequestError:
            self._owned = None
        else:
            self._owned = transaction.__enter__()

        connection = self.session.connection()
        self._guard = _WriteGuard(self.session, connection).__enter__()
        if self._owned is not None and connection.dialect.name in SET_TRANSACTION_DIALECTS:
            self._harden_transaction()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._owned is not None:
                with suppress(SQLAlchemyError):
                    self.session.rollback()
                self._owned.__exit__(exc_type, exc, tb)
        finally:
            self._owned = None
            if self._guard is not None:
                self._guard.__exit__(exc_type, exc, tb)
                self._guard = None

    def _harden_transaction(self) -> None:
        try:
            if self.isolation_level:
                level = self.isolation_level.upper().strip()
                if level not in ISOLATION_LEVELS:
                    current_app.logger.warning("Unrecognised isolation level %r", level)
                self.session.execute(text(f"SET TRANSACTION ISOLATION LEVEL {level}"))
            if self.enforce_db_readonly:
                self.session.execute(text("SET TRANSACTION READ ONLY"))
        except SQLAlchemyError as exc:
            current_app.logger.warning("SET TRANSACTION rejected (%s); relying on guards", exc)

    def commit(self) -> None:
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()
