"""Paging envelopes shared by every listing service."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CursorIn:
    """``cursor`` is the ``next_cursor`` of the previous page, ``None`` for the first."""

    cursor: str | None = None
    limit: int = 20


@dataclass(frozen=True, slots=True)
class PageMeta:
    page: int
    limit: int
    total: int


@dataclass(frozen=True, slots=True)
class CursorMeta:
    """``next_cursor`` is ``None`` on the last page; ``total`` ignores the cursor."""

    limit: int
    next_cursor: str | None
    total: int
