"""WSGI proxy middleware configuration helper."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """Trust ``X-Forwarded-*`` headers from ``TRUSTED_PROXY_HOPS`` proxies.

    The scheme matters here: secure session cookies are only honoured when
    Flask sees the original ``https`` request. ``0`` disables the middleware.
    """
    hops = int(app.config.get("TRUSTED_PROXY_HOPS", 1))
    if hops > 0:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops, x_prefix=hops)
