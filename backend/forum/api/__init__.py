"""HTTP surface of the forum: versioned blueprint groups under ``API_BASE_PREFIX``."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def _join_prefix(*segments: str) -> str:
    parts = [s.strip("/") for s in segments if s and s.strip("/")]
    return "/" + "/".join(parts)


def register_blueprint_group(
    app: Flask,
    *,
    base_prefix: str,
    entries: Iterable[tuple[Blueprint, str]],
) -> None:
    """Mount each ``(blueprint, relative_prefix)`` pair below ``base_prefix``.

    The blueprint's own ``url_prefix`` is overridden; an empty relative
    prefix mounts the blueprint at the version root (``/api/v1``).
    """
    for bp, rel_prefix in entries:
        prefix = _join_prefix(base_prefix, rel_prefix)
        app.register_blueprint(bp, url_prefix=prefix)
        app.logger.debug("Mounted blueprint %s at %s", bp.name, prefix)


def init_app(app: Flask) -> None:
    from forum.api.v1 import API_VERSION, REGISTRY

    base = _join_prefix(app.config.get("API_BASE_PREFIX", "/api"), API_VERSION)
    register_blueprint_group(app, base_prefix=base, entries=REGISTRY)


__all__ = ["init_app", "register_blueprint_group"]
