from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol

from authflow.services._shared.errors import DuplicateIdentifierError


@dataclass(frozen=True, slots=True)
class UserCandidate:
    """
    Write-model for a user about to be created.

    :ivar username: Normalized (trimmed, lowercased) username.
    :ivar email: Normalized (trimmed, lowercased) email.
    :ivar fullname: Trimmed display name.
    :ivar password_hash: Output of the password hasher, never plaintext.
    :ivar avatar: Durable media reference for the avatar.
    :ivar cover_image: Durable media reference for the cover, ``""`` if none.
    """

    username: str
    email: str
    fullname: str
    password_hash: str
    avatar: str
    cover_image: str = ""


@dataclass(frozen=True, slots=True)
class UserRecord:
    """
    Read-model for a stored user, including its secret fields.

    Only the session manager sees this type; callers receive the sanitized
    ``UserPublicOut`` instead.
    """

    id: int
    username: str
    email: str
    fullname: str
    password_hash: str
    avatar: str
    cover_image: str
    refresh_token: str | None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CredentialStore(Protocol):
    """
    Persistence boundary for user identity records.

    Implementations MUST treat username and email as case-insensitive and
    unique, and MUST make ``swap_refresh_token`` atomic.
    Outages surface as ``StoreUnavailableError``.
    """

    def find_by_identifier(
        self, *, username: str | None = None, email: str | None = None
    ) -> UserRecord | None:
        """Return the user matching ``username`` OR ``email`` (if any)."""

    def find_by_id(self, user_id: int) -> UserRecord | None:
        """Return the user with the given id (if any)."""

    def create(self, candidate: UserCandidate) -> UserRecord:
        """
        Persist a new user.

        :raises DuplicateIdentifierError: If username or email is taken.
        :raises StoreUnavailableError: If the store cannot be reached.
        :raises ValueError: If the store rejects a field value.
        """

    def set_refresh_token(self, user_id: int, token: str | None) -> bool:
        """
        Unconditionally store (or clear with ``None``) the refresh token.

        :returns: ``True`` if the user exists.
        """

    def swap_refresh_token(self, user_id: int, *, expected: str, new: str) -> bool:
        """
        Compare-and-swap the refresh token.

        Writes ``new`` only if the stored value still equals ``expected``.

        :returns: ``True`` if the write happened.
        """


class InMemoryCredentialStore(CredentialStore):
    """
    Dict-backed credential store.

    .. note::
       A single lock guards every read-modify-write so ``swap_refresh_token``
       is atomic across threads.
    """

    def __init__(self) -> None:
        self._by_id: dict[int, UserRecord] = {}
        self._seq = 0
        self._lock = threading.Lock()

    # ------------------------- helpers -------------------------

    @staticmethod
    def _norm(value: str | None) -> str | None:
        return value.strip().lower() if value else None

    def _match(self, username: str | None, email: str | None) -> UserRecord | None:
        for user in self._by_id.values():
            if username and user.username.lower() == username:
                return user
            if email and user.email.lower() == email:
                return user
        return None

    # -------------------------- API ----------------------------

    def find_by_identifier(
        self, *, username: str | None = None, email: str | None = None
    ) -> UserRecord | None:
        with self._lock:
            return self._match(self._norm(username), self._norm(email))

    def find_by_id(self, user_id: int) -> UserRecord | None:
        with self._lock:
            return self._by_id.get(user_id)

    def create(self, candidate: UserCandidate) -> UserRecord:
        username = self._norm(candidate.username)
        email = self._norm(candidate.email)
        with self._lock:
            for user in self._by_id.values():
                if user.username.lower() == username:
                    raise DuplicateIdentifierError("username")
                if user.email.lower() == email:
                    raise DuplicateIdentifierError("email")
            self._seq += 1
            now = datetime.now(UTC)
            record = UserRecord(
                id=self._seq,
                username=candidate.username,
                email=candidate.email,
                fullname=candidate.fullname,
                password_hash=candidate.password_hash,
                avatar=candidate.avatar,
                cover_image=candidate.cover_image,
                refresh_token=None,
                created_at=now,
                updated_at=now,
            )
            self._by_id[record.id] = record
            return record

    def set_refresh_token(self, user_id: int, token: str | None) -> bool:
        with self._lock:
            user = self._by_id.get(user_id)
            if user is None:
                return False
            self._by_id[user_id] = replace(
                user, refresh_token=token, updated_at=datetime.now(UTC)
            )
            return True

    def swap_refresh_token(self, user_id: int, *, expected: str, new: str) -> bool:
        with self._lock:
            user = self._by_id.get(user_id)
            if user is None or user.refresh_token != expected:
                return False
            self._by_id[user_id] = replace(user, refresh_token=new, updated_at=datetime.now(UTC))
            return True
