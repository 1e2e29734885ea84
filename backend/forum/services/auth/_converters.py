from __future__ import annotations

from datetime import datetime

from forum.models.session import UserSession

from .dto import SessionOut


def session_to_out(row: UserSession, *, now: datetime, current_session_id: int | None) -> SessionOut:
    return SessionOut(
        id=row.id,
        user_agent=row.user_agent,
        ip=row.ip,
        client_platform=row.client_platform,
        created_at=row.created_at,
        expires_at=row.expires_at,
        last_seen_at=row.last_seen_at,
        revoked_at=row.revoked_at,
        is_active=row.is_active(now),
        is_current=row.id == current_session_id,
    )
