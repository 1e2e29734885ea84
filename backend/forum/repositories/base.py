"""Repository base class plus the offset and keyset paging they share.

Repositories flush but never commit; the unit of work owns the transaction.

Listings come in two shapes. Admin and account listings (users, sessions,
restrictions, reserved terms, edit history) are offset pages sorted by
whitelisted public tokens such as ``-created_at``. Feeds, comment threads,
community rules and search results are keyset pages addressed by an opaque
cursor: the URL-safe base64 of a JSON array holding the sort-key values of a
page's last row, primary key last. Cursors that do not decode to values of
the right types for the requested ordering raise :class:`InvalidCursor`.
"""

from __future__ import annotations

import base64
import json
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import ColumnElement, Select, and_, func, or_, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from forum.core.extensions import db

E = TypeVar("E")

DEFAULT_LIMIT = 20
MAX_LIMIT = 100

#: ``(column, descending)`` pairs, most significant first.
KeysetKeys = Sequence[tuple[InstrumentedAttribute[Any], bool]]


def clamp_limit(limit: int | None, *, default: int = DEFAULT_LIMIT, maximum: int = MAX_LIMIT) -> int:
    if limit is None:
        return default
    return max(1, min(int(limit), maximum))


@dataclass(slots=True)
class Pagination:
    """Offset paging request: 1-based ``page``, ``limit`` and sort tokens."""

    page: int
    limit: int
    sort: list[str]


@dataclass(slots=True)
class Page(Generic[E]):
    items: Sequence[E]
    total: int
    page: int
    limit: int


@dataclass(slots=True)
class KeysetPage(Generic[E]):
    """
    One cursor page.

    ``next_cursor`` is ``None`` on the last page; ``total`` counts every row
    matching the listing's filters (0 when counting was skipped).
    """

    items: Sequence[E]
    next_cursor: str | None
    limit: int
    total: int = 0


def order_by_tokens(
    stmt: Select[Any],
    columns: Mapping[str, InstrumentedAttribute[Any]],
    tokens: Iterable[str],
    *,
    tiebreaker: InstrumentedAttribute[Any] | None = None,
) -> Select[Any]:
    """
    Order ``stmt`` by public tokens (``"-created_at"`` is descending).

    Tokens missing from ``columns`` are skipped. ``tiebreaker`` is appended
    ascending so equal sort values still page deterministically.
    """
    clauses = []
    for token in tokens:
        name = token.lstrip("-").strip()
        column = columns.get(name)
        if column is not None:
            clauses.append(column.desc() if token.startswith("-") else column.asc())
    if tiebreaker is not None:
        clauses.append(tiebreaker.asc())
    return stmt.order_by(*clauses) if clauses else stmt


def count_rows(session: Session, stmt: Select[Any]) -> int:
    subquery = stmt.order_by(None).subquery()
    return int(session.execute(select(func.count()).select_from(subquery)).scalar_one())


def paginate_select(
    session: Session,
    stmt: Select[Any],
    *,
    page: int,
    limit: int,
    with_total: bool = True,
) -> tuple[list[Any], int]:
    """Run an ordered select as one ``LIMIT``/``OFFSET`` page; ``(items, total)``."""
    page, limit = max(int(page), 1), max(int(limit), 1)
    total = count_rows(session, stmt) if with_total else 0
    rows = session.execute(stmt.limit(limit).offset((page - 1) * limit)).scalars().all()
    return list(rows), total


class InvalidCursor(ValueError):
    """Raised when a pagination cursor cannot be decoded for the given keys."""


def _to_json_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def encode_cursor(values: Sequence[Any]) -> str:
    """Encode sort-key values into an opaque, URL-safe cursor token."""
    raw = json.dumps([_to_json_value(v) for v in values], separators=(",", ":"))
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii").rstrip("=")


def _coerce_cursor_value(column: InstrumentedAttribute[Any], raw: Any) -> Any:
    """Coerce a decoded JSON value to ``column``'s Python type."""
    try:
        python_type = column.type.python_type
    except NotImplementedError as exc:
        raise InvalidCursor(f"Column {column.key!r} cannot be used as a cursor key.") from exc

    if python_type is datetime:
        if not isinstance(raw, str):
            raise InvalidCursor("Cursor timestamp must be a string.")
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError as exc:
            raise InvalidCursor("Cursor timestamp is malformed.") from exc
        return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)

    if python_type is int:
        # bool is an int subclass; reject it explicitly.
        if isinstance(raw, bool) or not isinstance(raw, int):
            raise InvalidCursor("Cursor value must be an integer.")
        return raw

    if not isinstance(raw, python_type):
        raise InvalidCursor(f"Cursor value for {column.key!r} has the wrong type.")
    return raw


def decode_cursor(token: str, keys: KeysetKeys) -> list[Any]:
    """Decode ``token`` into one value per key, typed after each column.

    :raises InvalidCursor: If the token is not valid base64/JSON, does not
        hold exactly one value per key, or a value has the wrong type.
    """
    if not token or not isinstance(token, str):
        raise InvalidCursor("Cursor is empty.")
    try:
        padded = token + "=" * (-len(token) % 4)
        payload = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
    except ValueError as exc:
        # binascii.Error, UnicodeError and JSONDecodeError are all ValueErrors.
        raise InvalidCursor("Cursor is malformed.") from exc

    if not isinstance(payload, list) or len(payload) != len(keys):
        raise InvalidCursor("Cursor does not match the requested ordering.")
    return [_coerce_cursor_value(col, raw) for (col, _desc), raw in zip(keys, payload)]


def keyset_after(keys: KeysetKeys, values: Sequence[Any]) -> ColumnElement[bool]:
    """Build the predicate selecting rows strictly after ``values``.

    For keys ``k1..kn`` this expands to::

        (k1 > v1) OR (k1 = v1 AND k2 > v2) OR ... OR (k1 = v1 AND ... AND kn > vn)

    with ``<`` in place of ``>`` for descending keys, so mixed directions
    are supported. Portable across backends (no row-value comparison).
    """
    clauses: list[ColumnElement[bool]] = []
    for i, (column, descending) in enumerate(keys):
        prefix = [keys[j][0] == values[j] for j in range(i)]
        step = column < values[i] if descending else column > values[i]
        clauses.append(and_(*prefix, step))
    return or_(*clauses)


def keyset_order(keys: KeysetKeys) -> list[Any]:
    """Return the ``ORDER BY`` clauses matching ``keys``."""
    return [col.desc() if descending else col.asc() for col, descending in keys]


def paginate_keyset(
    session: Session,
    stmt: Select[Any],
    keys: KeysetKeys,
    *,
    cursor: str | None,
    limit: int,
    with_total: bool = True,
) -> KeysetPage[Any]:
    """Execute ``stmt`` as one keyset page.

    Fetches ``limit + 1`` rows to learn whether another page exists; the
    extra row is dropped and the cursor is built from the last kept row.

    :param session: Active SQLAlchemy session.
    :param stmt: Filtered select without ``ORDER BY``.
    :param keys: Ordered ``(column, descending)`` pairs ending with the PK.
    :param cursor: Token from a previous page, or ``None`` for the first.
    :param limit: Page size (clamped to ``1..MAX_LIMIT``).
    :param with_total: Whether to count every row matching ``stmt``.
    :raises InvalidCursor: If ``cursor`` cannot be decoded for ``keys``.
    """
    limit = clamp_limit(limit)
    total = count_rows(session, stmt) if with_total else 0

    if cursor:
        stmt = stmt.where(keyset_after(keys, decode_cursor(cursor, keys)))
    stmt = stmt.order_by(*keyset_order(keys)).limit(limit + 1)

    rows = list(session.execute(stmt).scalars().all())
    next_cursor: str | None = None
    if len(rows) > limit:
        rows = rows[:limit]
        last = rows[-1]
        next_cursor = encode_cursor([getattr(last, col.key) for col, _desc in keys])
    return KeysetPage(items=rows, next_cursor=next_cursor, limit=limit, total=total)


class BaseRepository(Generic[E]):
    """
    Persistence for one mapped model.

    Subclasses set ``model`` and may whitelist public sort tokens
    (``_sortable_fields``) and assignable keys (``_updatable_fields``).

    Models with ``deleted_at`` are soft-deleted. ``get`` still returns a
    deleted row so services can answer "gone" rather than "never existed";
    ``get_live`` and ``_live`` hide it.
    """

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session if self._session is not None else cast(Session, db.session)

    # ------------------------------ Hooks ------------------------------------

    def _sortable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {}

    def _updatable_fields(self) -> set[str]:
        return set()

    # ------------------------------ Soft delete ------------------------------

    @property
    def soft_deletes(self) -> bool:
        return hasattr(self.model, "deleted_at")

    def _live(self, stmt: Select[Any]) -> Select[Any]:
        if self.soft_deletes:
            return stmt.where(self.model.deleted_at.is_(None))  # type: ignore[attr-defined]
        return stmt

    def _pk(self) -> InstrumentedAttribute[Any]:
        pk = getattr(self.model, "id", None)
        if pk is None:
            raise RuntimeError(f"{self.model.__name__} has no 'id' column")
        return pk

    # --------------------------------- CRUD ----------------------------------

    def add(self, instance: E) -> E:
        """Stage ``instance`` and flush so its id is assigned."""
        self.session.add(instance)
        self.flush()
        return instance

    def get(self, entity_id: Any) -> E | None:
        stmt = select(self.model).where(self._pk() == entity_id)
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def get_live(self, entity_id: Any) -> E | None:
        entity = self.get(entity_id)
        if entity is None or getattr(entity, "deleted_at", None) is not None:
            return None
        return entity

    def get_for_update(self, entity_id: Any) -> E | None:
        """Like :meth:`get` but row-locked (``FOR UPDATE``; a no-op on SQLite)."""
        stmt = select(self.model).where(self._pk() == entity_id).with_for_update(of=self.model)
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def delete(self, instance: E) -> None:
        """Soft-delete when the model supports it, hard-delete otherwise; flushes."""
        if self.soft_deletes:
            instance.mark_deleted()  # type: ignore[attr-defined]
        else:
            self.session.delete(instance)
        self.flush()

    def flush(self) -> None:
        self.session.flush()

    def assign_updates(self, instance: E, fields: Mapping[str, Any], *, flush: bool = True) -> E:
        """
        Set whitelisted attributes on ``instance`` through ``setattr`` so model
        ``@validates`` hooks run.

        :raises ValueError: For keys outside ``_updatable_fields``.
        """
        allowed = self._updatable_fields()
        rejected = sorted(set(fields) - allowed)
        if rejected:
            raise ValueError(f"Fields not updatable on {self.model.__name__}: {rejected}")
        for key, value in fields.items():
            setattr(instance, key, value)
        if flush:
            self.flush()
        return instance

    # ------------------------------- Listing ---------------------------------

    def paginate(self, pagination: Pagination, *, with_total: bool = True) -> Page[E]:
        """Offset page over every live row."""
        return self.paginate_stmt(self._live(select(self.model)), pagination, with_total=with_total)

    def paginate_stmt(
        self,
        stmt: Select[Any],
        pagination: Pagination,
        *,
        with_total: bool = True,
    ) -> Page[E]:
        """Offset page over a caller-built select, ordered by ``pagination.sort``."""
        ordered = order_by_tokens(
            stmt, self._sortable_fields(), pagination.sort, tiebreaker=self._pk()
        )
        items, total = paginate_select(
            self.session,
            ordered,
            page=pagination.page,
            limit=pagination.limit,
            with_total=with_total,
        )
        return Page(items=cast(list[E], items), total=total, page=pagination.page, limit=pagination.limit)

    def keyset(
        self,
        stmt: Select[Any],
        keys: KeysetKeys,
        *,
        cursor: str | None,
        limit: int,
        with_total: bool = True,
    ) -> KeysetPage[E]:
        """
        Cursor page over ``stmt``. The primary key is appended to ``keys``
        (in the direction of the last key) unless already present.
        """
        pk = self._pk()
        ordered = list(keys)
        if not ordered or ordered[-1][0] is not pk:
            ordered.append((pk, ordered[-1][1] if ordered else False))
        page = paginate_keyset(
            self.session, stmt, ordered, cursor=cursor, limit=limit, with_total=with_total
        )
        return cast(KeysetPage[E], page)
