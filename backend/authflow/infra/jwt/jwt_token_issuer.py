# authflow/infra/jwt/jwt_token_issuer.py
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

import jwt

from authflow.services._shared.errors import TokenInvalidError
from authflow.services._shared.ports import (
    ACCESS_CLAIMS,
    REFRESH_CLAIMS,
    TokenIssuer,
    TokenKind,
)

log = logging.getLogger(__name__)


@dataclass(slots=True)
class JWTTokenIssuer(TokenIssuer):
    """
    HS256 JWT issuer with one secret and one lifetime per token kind.

    .. note::
       Access tokens use ``sub`` (stringified user id) as identity claim and
       ``type="access"`` plus a ``csrf`` claim, which is the shape
       ``flask-jwt-extended`` expects, so protected routes can verify them
       (and their CSRF cookie) with ``JWT_SECRET_KEY`` set to ``access_secret``.
    """

    access_secret: str
    refresh_secret: str
    access_expires: timedelta
    refresh_expires: timedelta
    algorithm: str = "HS256"

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> JWTTokenIssuer:
        """Build an issuer from Flask-style configuration keys."""
        access_secret = str(config["ACCESS_TOKEN_SECRET"])
        refresh_secret = str(config["REFRESH_TOKEN_SECRET"])
        if access_secret == refresh_secret:
            raise RuntimeError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must differ.")
        return cls(
            access_secret=access_secret,
            refresh_secret=refresh_secret,
            access_expires=timedelta(seconds=int(config["ACCESS_TOKEN_EXPIRES"])),
            refresh_expires=timedelta(seconds=int(config["REFRESH_TOKEN_EXPIRES"])),
            algorithm=str(config.get("JWT_ALGORITHM", "HS256")),
        )

    # ------------------------------ helpers ------------------------------

    def _secret(self, kind: TokenKind) -> str:
        return self.access_secret if kind is TokenKind.ACCESS else self.refresh_secret

    def _lifetime(self, kind: TokenKind) -> timedelta:
        return self.access_expires if kind is TokenKind.ACCESS else self.refresh_expires

    def _encode(self, kind: TokenKind, claims: Mapping[str, Any], names: tuple[str, ...]) -> str:
        missing = [name for name in names if claims.get(name) in (None, "")]
        if missing:
            raise ValueError(f"Missing {kind.value} token claims: {missing}")

        now = datetime.now(UTC)
        payload: dict[str, Any] = {name: claims[name] for name in names}
        payload.update(
            sub=str(claims["id"]),
            type=kind.value,
            jti=uuid4().hex,
            iat=now,
            exp=now + self._lifetime(kind),
        )
        if kind is TokenKind.ACCESS:
            # double-submit value for cookie-authenticated writes
            payload["csrf"] = uuid4().hex
        return jwt.encode(payload, self._secret(kind), algorithm=self.algorithm)

    # -------------------------------- API --------------------------------

    def issue_access(self, claims: Mapping[str, Any]) -> str:
        return self._encode(TokenKind.ACCESS, claims, ACCESS_CLAIMS)

    def issue_refresh(self, claims: Mapping[str, Any]) -> str:
        # Anything beyond the id is dropped on purpose
        return self._encode(TokenKind.REFRESH, claims, REFRESH_CLAIMS)

    def verify(self, token: str, kind: TokenKind) -> dict[str, Any]:
        if not token or not isinstance(token, str):
            raise TokenInvalidError()
        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                self._secret(kind),
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp", "iat", "jti"]},
            )
        except jwt.ExpiredSignatureError as exc:
            log.debug("token.expired kind=%s", kind.value)
            raise TokenInvalidError() from exc
        except jwt.InvalidTokenError as exc:
            log.debug("token.rejected kind=%s reason=%s", kind.value, type(exc).__name__)
            raise TokenInvalidError() from exc

        if payload.get("type") != kind.value:
            log.debug("token.rejected kind=%s reason=wrong_type", kind.value)
            raise TokenInvalidError()
        return payload
