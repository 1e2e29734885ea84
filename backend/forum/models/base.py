"""Column mixins and time helpers shared by the forum models."""

from __future__ import annotations

import hashlib
from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    """Label naive datetimes as UTC.

    SQLite hands back naive values for ``DateTime(timezone=True)``; since
    everything is written in UTC the label is exact.
    """
    if value is None:
        return None
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)


def enum_values(enum_cls: type[Enum]) -> list[str]:
    """``values_callable`` for ``sqlalchemy.Enum`` so the stored strings are the enum values."""
    return [member.value for member in enum_cls]


class PKMixin:
    id: Mapped[int] = mapped_column(Integer, primary_key=True)


class TimestampMixin:
    """
    ``created_at`` on insert and ``updated_at`` on every change.

    Both are filled in Python rather than by ``server_default`` so they keep
    microseconds on every backend: keyset cursors compare on them, and the
    ETag of a post or comment changes with ``updated_at``.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    def compute_etag(self) -> str:
        """Strong validator for ``If-Match``: sha256 of ``<id>:<updated_at>``."""
        updated_at = as_utc(self.updated_at)
        raw = f"{getattr(self, 'id', '')}:{updated_at.isoformat() if updated_at else ''}"
        return hashlib.sha256(raw.encode()).hexdigest()


class SoftDeleteMixin:
    """``deleted_at`` marker; repositories filter deleted rows out of reads."""

    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def mark_deleted(self, when: datetime | None = None) -> None:
        """Stamp ``deleted_at`` once; later calls keep the first timestamp."""
        if self.deleted_at is None:
            self.deleted_at = when or utcnow()


class ReprMixin:
    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={getattr(self, 'id', None)}>"
