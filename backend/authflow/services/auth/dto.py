# authflow/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from authflow.services._shared.ports import MediaSource, UserRecord

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for registration.

    Text fields arrive raw; the session manager trims and normalizes them.

    :param username: Desired username.
    :type username: str
    :param email: Contact/login email.
    :type email: str
    :param fullname: Display name.
    :type fullname: str
    :param password: Raw password (hashed before storage).
    :type password: str
    :param avatar: Required avatar file handle.
    :type avatar: MediaSource | None
    :param cover_image: Optional cover image file handle.
    :type cover_image: MediaSource | None
    """

    username: str
    email: str
    fullname: str
    password: str
    avatar: MediaSource | None = None
    cover_image: MediaSource | None = None


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login. At least one of ``username``/``email`` is required.

    :param password: Raw password (to be verified).
    :type password: str
    :param username: Username identifier.
    :type username: str | None
    :param email: Email identifier.
    :type email: str | None
    """

    password: str
    username: str | None = None
    email: str | None = None


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh JWT, ``None`` when absent.
    :type refresh_token: str | None
    """

    refresh_token: str | None


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout.

    :param user_id: Authenticated user id.
    :type user_id: int
    :param access_jti: ``jti`` of the access token used for the call; when set
        together with ``access_expires_at`` that token is denylisted.
    :type access_jti: str | None
    :param access_expires_at: Expiry of that access token.
    :type access_expires_at: datetime | None
    """

    user_id: int
    access_jti: str | None = None
    access_expires_at: datetime | None = None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """Sanitized user view: never carries the password hash or refresh token."""

    id: int
    username: str
    email: str
    fullname: str
    avatar: str
    cover_image: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_record(cls, record: UserRecord) -> UserPublicOut:
        return cls(
            id=record.id,
            username=record.username,
            email=record.email,
            fullname=record.fullname,
            avatar=record.avatar,
            cover_image=record.cover_image,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class LoginOut:
    """Sanitized user plus a freshly issued token pair."""

    user: UserPublicOut
    access_token: str
    refresh_token: str
