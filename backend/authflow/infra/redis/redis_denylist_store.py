import math
from datetime import UTC, datetime
from typing import cast

import redis  # type: ignore[import-untyped]

from authflow.services._shared.ports import TokenDenylistStore


class RedisTokenDenylistStore(TokenDenylistStore):
    """
    Denylist for **access tokens** by jti.

    Each revoked jti is a marker key whose TTL matches the remaining token
    lifetime, so Redis drops entries once the token would be expired anyway.
    """

    def __init__(self, r: redis.Redis, *, prefix: str = "deny:at:"):
        self.r = r
        self.prefix = prefix

    def _k(self, jti: str) -> str:
        return f"{self.prefix}{jti}"

    def is_revoked(self, jti: str) -> bool:
        return cast(int, self.r.exists(self._k(jti))) == 1

    def revoke_jti(self, *, jti: str, expires_at: datetime) -> None:
        remaining = expires_at.timestamp() - datetime.now(UTC).timestamp()
        if remaining <= 0:
            # already expired: nothing left to deny
            return
        # round up so a token with under a second left is still denied
        ttl = math.ceil(remaining)
        # idempotent
        self.r.set(self._k(jti), "1", ex=ttl)
