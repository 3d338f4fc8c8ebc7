"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from flask import Flask

from authflow.core.config import BaseConfig, get_config
from authflow.core.logger import configure_logging, init_app as init_logging

if TYPE_CHECKING:
    from authflow.services.auth.service import SessionManager


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    session_manager: SessionManager | None = None,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    :param config: Config class, object or name understood by ``get_config``.
    :param session_manager: Pre-built session manager; the default one is
        assembled from configuration when omitted.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    if isinstance(config, str):
        config = get_config(config)
    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from authflow.core import proxy

    proxy.init_app(app)

    from authflow.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from authflow.core import cors

    cors.init_app(app)

    from authflow.core import security

    security.init_app(app, session_manager)

    from authflow.api import init_app as init_api

    init_api(app)

    from authflow.core import errors

    errors.init_app(app)

    return app
