from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, Protocol


class TokenKind(str, Enum):
    """Token families; each one has its own secret and lifetime."""

    ACCESS = "access"
    REFRESH = "refresh"


# Claims added by the issuer on top of the caller's claims
REGISTERED_CLAIMS = frozenset({"sub", "type", "jti", "iat", "exp", "csrf"})

ACCESS_CLAIMS = ("id", "email", "username")
REFRESH_CLAIMS = ("id",)


class TokenIssuer(Protocol):
    """Port for issuing and verifying signed, time-bounded tokens."""

    def issue_access(self, claims: Mapping[str, Any]) -> str:
        """Sign an access token carrying ``{id, email, username}``."""

    def issue_refresh(self, claims: Mapping[str, Any]) -> str:
        """Sign a refresh token carrying only ``{id}``."""

    def verify(self, token: str, kind: TokenKind) -> dict[str, Any]:
        """
        Decode and validate ``token`` as a ``kind`` token.

        :returns: The full claim set (caller claims plus registered claims).
        :raises TokenInvalidError: On bad signature, malformed token, wrong
            token type or expiry.
        """
