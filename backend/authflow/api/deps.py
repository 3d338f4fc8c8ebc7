"""Shared API helpers for request handling and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, jsonify, request

from authflow.core.security import EXTENSION_KEY
from authflow.services._shared.errors import ServiceError
from authflow.services.auth.service import SessionManager

F = TypeVar("F", bound=Callable[..., Any])
T = TypeVar("T")


def get_session_manager() -> SessionManager:
    """Return the session manager installed on the current application."""

    return cast(SessionManager, current_app.extensions[EXTENSION_KEY])


def call_service(operation: Callable[..., T], *args: Any) -> T:
    """Run a session-manager operation, turning service errors into API errors."""

    try:
        return operation(*args)
    except ServiceError as exc:
        raise get_session_manager().translate_exceptions(exc) from exc


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
