"""Authentication helpers for tests."""

from __future__ import annotations

from forum.models.user import User
from forum.services._shared.base import ServiceContext


def member_ctx(user: User, *, session_id: int | None = None) -> ServiceContext:
    """Build the service context of a signed-in member (admins get the extra scope).

    Parameters
    ----------
    user:
        Persisted account acting as the caller.
    session_id:
        Optional login session backing the token.
    """
    scopes = ("member", "admin") if user.is_admin else ("member",)
    return ServiceContext(actor_id=user.id, session_id=session_id, scopes=scopes)


def guest_ctx(guest_id: int = 1) -> ServiceContext:
    """Build the service context of a guest visitor."""
    return ServiceContext(guest_id=guest_id, scopes=("guest",))


def login(client, email: str, password: str = "Passw0rd!") -> dict:
    """Log in through the API and return the ``data`` envelope.

    Returns
    -------
    dict
        ``{"user": {...}, "token": {"access_token": ..., "refresh_token": ...}}``
    """
    resp = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["data"]


def bearer(access_token: str) -> dict[str, str]:
    """Return an ``Authorization`` header for ``access_token``."""
    return {"Authorization": f"Bearer {access_token}"}
