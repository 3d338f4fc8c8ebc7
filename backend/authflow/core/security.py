"""Session-manager wiring and ``flask-jwt-extended`` callbacks."""

from __future__ import annotations

import logging
from typing import Any

from flask import Flask, current_app

from authflow.core.errors import problem_response
from authflow.core.extensions import jwt
from authflow.infra.jwt.jwt_token_issuer import JWTTokenIssuer
from authflow.infra.media.local_media_uploader import LocalMediaUploader
from authflow.infra.redis.redis_denylist_store import RedisTokenDenylistStore
from authflow.infra.security.werkzeug_password_hasher import WerkzeugPasswordHasher
from authflow.infra.sql.sqlalchemy_credential_store import SQLAlchemyCredentialStore
from authflow.services._shared.ports import InMemoryDenylistStore, TokenDenylistStore
from authflow.services.auth.service import SessionManager

log = logging.getLogger(__name__)

EXTENSION_KEY = "session_manager"


def build_session_manager(app: Flask) -> SessionManager:
    """
    Assemble the production :class:`SessionManager` from ``app.config``.

    The access-token denylist lives in Redis when ``REDIS_URL`` is set and
    in process memory otherwise.
    """
    cfg = app.config
    redis_client = app.extensions.get("redis_client")
    denylist: TokenDenylistStore = (
        RedisTokenDenylistStore(redis_client) if redis_client is not None else InMemoryDenylistStore()
    )
    return SessionManager(
        store=SQLAlchemyCredentialStore(),
        hasher=WerkzeugPasswordHasher(
            method=cfg["PASSWORD_HASH_METHOD"],
            iterations=cfg.get("PASSWORD_HASH_ITERATIONS"),
        ),
        tokens=JWTTokenIssuer.from_config(cfg),
        uploader=LocalMediaUploader(cfg["UPLOAD_FOLDER"], cfg.get("MEDIA_BASE_URL", "/media")),
        denylist=denylist,
    )


def _register_jwt_callbacks() -> None:
    @jwt.token_in_blocklist_loader
    def _is_revoked(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]) -> bool:
        denylist = current_app.extensions[EXTENSION_KEY].denylist
        jti = jwt_payload.get("jti")
        return bool(denylist is not None and jti and denylist.is_revoked(jti))

    @jwt.unauthorized_loader
    def _missing_token(reason: str):
        return problem_response(status=401, code="unauthenticated", message=reason)

    @jwt.invalid_token_loader
    def _invalid_token(reason: str):
        return problem_response(status=401, code="token_invalid", message=reason)

    @jwt.expired_token_loader
    def _expired_token(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]):
        # same answer as a tampered token
        return problem_response(status=401, code="token_invalid", message="Invalid or expired token")

    @jwt.revoked_token_loader
    def _revoked_token(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]):
        return problem_response(status=401, code="token_revoked", message="Token has been revoked")


def init_app(app: Flask, manager: SessionManager | None = None) -> SessionManager:
    """
    Store the session manager on ``app.extensions`` and hook JWT callbacks.

    :param manager: Pre-built manager (tests inject in-memory collaborators).
    :returns: The installed manager.
    """
    manager = manager or build_session_manager(app)
    app.extensions[EXTENSION_KEY] = manager
    _register_jwt_callbacks()
    log.info(
        "Session manager ready",
        extra={"outcome": "denylist" if manager.denylist is not None else "no_denylist"},
    )
    return manager
