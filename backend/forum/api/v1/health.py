"""Liveness probe reporting database and token-denylist reachability."""

from __future__ import annotations

from flask import Blueprint, current_app
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from forum.api.deps import json_response, timing
from forum.core.extensions import db

bp = Blueprint("health", __name__)


def _database_state() -> str:
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:  # pragma: no cover - depends on DB backend
        current_app.logger.exception("health.database_unreachable")
        return "fail"
    return "ok"


def _denylist_state() -> str:
    client = current_app.extensions.get("redis_client")
    if client is None:
        return "memory"
    try:
        client.ping()
    except RedisError:  # pragma: no cover - depends on Redis availability
        current_app.logger.exception("health.redis_unreachable")
        return "fail"
    return "ok"


@bp.get("/health")
@timing
def healthcheck():
    """``200`` while the database answers, ``503`` otherwise."""
    database = _database_state()
    payload = {
        "status": "ok" if database == "ok" else "degraded",
        "db": database,
        "denylist": _denylist_state(),
        "version": current_app.config.get("APP_VERSION", "dev"),
        "commit": current_app.config.get("APP_COMMIT", "unknown"),
    }
    return json_response(payload, status=200 if database == "ok" else 503)
