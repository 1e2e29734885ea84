"""Application factory for the forum API."""

from __future__ import annotations

from flask import Flask

from forum import cli
from forum.api import init_app as init_api
from forum.core import cors, errors, extensions, logger, proxy, security
from forum.core.config import BaseConfig, get_config

# Order matters: the proxy fix must see raw requests first, the token
# denylist needs the extensions, and error handlers cover every blueprint.
_INITIALIZERS = (
    proxy.init_app,
    extensions.init_app,
    logger.init_app,
    cors.init_app,
    security.init_app,
    init_api,
    errors.init_app,
    cli.init_app,
)


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """
    Build a configured app.

    :param config: Settings object or import path; ``APP_ENV`` picks one when omitted.
    :param instance_config_filename: Optional overrides read from the instance folder.
    """
    app = Flask(__name__, instance_relative_config=instance_relative_config)
    app.config.from_object(config if config is not None else get_config())
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    logger.configure_logging(app.config.get("LOG_LEVEL", "INFO"))
    for initializer in _INITIALIZERS:
        initializer(app)

    app.logger.debug("app.created", extra={"env": app.config.get("APP_ENV")})
    return app
