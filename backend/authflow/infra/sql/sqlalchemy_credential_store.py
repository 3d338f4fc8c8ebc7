"""Credential store backed by the ``users`` table."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from authflow.models.user import User
from authflow.services._shared.errors import (
    DuplicateIdentifierError,
    StoreUnavailableError,
    violates,
)
from authflow.services._shared.ports import CredentialStore, UserCandidate, UserRecord
from authflow.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

log = logging.getLogger(__name__)


def _to_record(user: User) -> UserRecord:
    return UserRecord(
        id=user.id,
        username=user.username,
        email=user.email,
        fullname=user.fullname,
        password_hash=user.password_hash,
        avatar=user.avatar,
        cover_image=user.cover_image or "",
        refresh_token=user.refresh_token,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def _duplicate_identifier(exc: IntegrityError) -> str:
    # PostgreSQL names the constraint; SQLite names the column.
    if violates(exc, "uq_users_username") or violates(exc, "users.username"):
        return "username"
    if violates(exc, "uq_users_email") or violates(exc, "users.email"):
        return "email"
    return "username_or_email"


class SQLAlchemyCredentialStore(CredentialStore):
    """
    :class:`CredentialStore` over :class:`UserRepository` and units of work.

    Each call runs in its own unit of work. Reads use the read-only UoW,
    writes commit on success.

    :param rw_uow: Factory for read-write units of work.
    :param ro_uow: Factory for read-only units of work.
    """

    def __init__(
        self,
        *,
        rw_uow: Callable[[], SQLAlchemyUnitOfWork] = SQLAlchemyUnitOfWork,
        ro_uow: Callable[[], SQLAlchemyReadOnlyUnitOfWork] = SQLAlchemyReadOnlyUnitOfWork,
    ) -> None:
        self._rw_uow = rw_uow
        self._ro_uow = ro_uow

    @contextmanager
    def _outage_guard(self) -> Iterator[None]:
        try:
            yield
        except OperationalError as exc:
            log.error("credential_store.unavailable", exc_info=True)
            raise StoreUnavailableError() from exc

    # ------------------------------ reads ------------------------------

    def find_by_identifier(
        self, *, username: str | None = None, email: str | None = None
    ) -> UserRecord | None:
        with self._outage_guard(), self._ro_uow() as uow:
            user = uow.users.get_by_username_or_email(username=username, email=email)
            return _to_record(user) if user is not None else None

    def find_by_id(self, user_id: int) -> UserRecord | None:
        with self._outage_guard(), self._ro_uow() as uow:
            user = uow.users.get(user_id)
            return _to_record(user) if user is not None else None

    # ------------------------------ writes -----------------------------

    def create(self, candidate: UserCandidate) -> UserRecord:
        """
        Insert a new user.

        :raises DuplicateIdentifierError: When a unique constraint fires.
        :raises StoreUnavailableError: When the database cannot be reached.
        :raises ValueError: When the database rejects the row for another reason.
        """
        try:
            with self._outage_guard(), self._rw_uow() as uow:
                user = User(
                    username=candidate.username,
                    email=candidate.email,
                    fullname=candidate.fullname,
                    password_hash=candidate.password_hash,
                    avatar=candidate.avatar,
                    cover_image=candidate.cover_image,
                )
                uow.users.add(user)
                record = _to_record(user)
        except IntegrityError as exc:
            raise DuplicateIdentifierError(_duplicate_identifier(exc)) from exc
        except SQLAlchemyError as exc:
            log.error("credential_store.create_rejected", exc_info=True)
            raise ValueError("User row rejected by the database") from exc
        return record

    def set_refresh_token(self, user_id: int, token: str | None) -> bool:
        with self._outage_guard(), self._rw_uow() as uow:
            return uow.users.set_refresh_token(user_id, token)

    def swap_refresh_token(self, user_id: int, *, expected: str, new: str) -> bool:
        with self._outage_guard(), self._rw_uow() as uow:
            return uow.users.compare_and_set_refresh_token(user_id, expected=expected, new=new)
