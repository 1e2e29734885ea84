"""Extension singletons bound to the app in :func:`init_app`."""

from __future__ import annotations

import redis  # type: ignore[import-untyped]
from flask import Flask
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

# Deterministic constraint names keep Alembic autogenerate diffs stable.
NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

db: SQLAlchemy = SQLAlchemy(
    metadata=MetaData(naming_convention=NAMING_CONVENTION),
    session_options={"autoflush": False},
)
migrate = Migrate(render_as_batch=True)
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)


def _connect_redis(url: str) -> redis.Redis:
    client = redis.Redis.from_url(url)
    try:
        client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Redis at {url!r} is unreachable") from exc
    return client


def init_app(app: Flask) -> None:
    """Bind the extensions and choose the access-token denylist backend.

    With ``REDIS_URL`` set the denylist lives in Redis and the client is kept
    in ``app.extensions["redis_client"]``; otherwise it is process-local.
    Either way it is published as ``app.extensions["token_denylist"]``.
    """
    db.init_app(app)
    from forum import models  # noqa: F401  (register tables on the metadata)

    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    from forum.infra.redis.redis_denylist_store import RedisTokenDenylistStore
    from forum.services._shared.ports.denylist_store import InMemoryDenylistStore

    redis_url = app.config.get("REDIS_URL")
    if redis_url:
        client = _connect_redis(redis_url)
        app.extensions["redis_client"] = client
        app.extensions["token_denylist"] = RedisTokenDenylistStore(
            client, prefix=app.config.get("DENYLIST_KEY_PREFIX", "forum:denylist:")
        )
    else:
        app.extensions.pop("redis_client", None)
        app.extensions["token_denylist"] = InMemoryDenylistStore()
        app.logger.info("REDIS_URL unset; token denylist kept in process memory")
