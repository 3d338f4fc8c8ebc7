"""
authflow.services._shared.ports
===============================

Collection of *ports* (hexagonal interfaces) the session manager depends on.

These ports decouple the service layer from concrete implementations of
credential persistence, password hashing, token signing, token revocation and
media storage.

Modules
-------
- :mod:`credential_store`:
    :class:`~.CredentialStore` plus the :class:`~.UserCandidate` /
    :class:`~.UserRecord` models and an in-memory implementation.

- :mod:`password_hasher`:
    :class:`~.PasswordHasher`: salted one-way hash and verify.

- :mod:`token_issuer`:
    :class:`~.TokenIssuer` and :class:`~.TokenKind`: access/refresh JWTs.

- :mod:`denylist_store`:
    :class:`~.TokenDenylistStore`: early revocation of access tokens.

- :mod:`media_uploader`:
    :class:`~.MediaUploader`: durable references for uploaded files.

Design Notes
------------
Concrete adapters (SQLAlchemy, Redis, PyJWT, werkzeug, local disk) live under
``authflow.infra``. In-memory doubles stay next to their port.
"""

from __future__ import annotations

from .credential_store import (
    CredentialStore,
    InMemoryCredentialStore,
    UserCandidate,
    UserRecord,
)
from .denylist_store import InMemoryDenylistStore, TokenDenylistStore
from .media_uploader import InMemoryMediaUploader, MediaSource, MediaUploader
from .password_hasher import PasswordHasher
from .token_issuer import (
    ACCESS_CLAIMS,
    REFRESH_CLAIMS,
    REGISTERED_CLAIMS,
    TokenIssuer,
    TokenKind,
)

__all__ = [
    "CredentialStore",
    "InMemoryCredentialStore",
    "UserCandidate",
    "UserRecord",
    "TokenDenylistStore",
    "InMemoryDenylistStore",
    "MediaSource",
    "MediaUploader",
    "InMemoryMediaUploader",
    "PasswordHasher",
    "TokenIssuer",
    "TokenKind",
    "ACCESS_CLAIMS",
    "REFRESH_CLAIMS",
    "REGISTERED_CLAIMS",
]
