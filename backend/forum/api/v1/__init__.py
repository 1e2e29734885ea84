"""Version 1 of the HTTP API: every blueprint and where it is mounted."""

from __future__ import annotations

from flask import Blueprint

from .admin import bp as admin_bp
from .auth import bp as auth_bp
from .comments import bp as comments_bp
from .communities import bp as communities_bp
from .health import bp as health_bp
from .me import bp as me_bp
from .posts import bp as posts_bp
from .users import bp as users_bp

API_VERSION = "v1"

# (blueprint, prefix below /api/v1)
REGISTRY: list[tuple[Blueprint, str]] = [
    (health_bp, ""),
    (auth_bp, "/auth"),
    (me_bp, "/me"),
    (users_bp, "/users"),
    (communities_bp, "/communities"),
    (posts_bp, "/posts"),
    (comments_bp, "/comments"),
    (admin_bp, "/admin"),
]
