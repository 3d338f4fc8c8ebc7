# authflow/services/auth/service.py
from __future__ import annotations

import logging
from typing import Any

from authflow.services._shared.base import BaseService
from authflow.services._shared.errors import (
    ConflictError,
    CreationFailedError,
    DuplicateIdentifierError,
    InvalidCredentialsError,
    NotFoundError,
    StoreUnavailableError,
    TokenInvalidError,
    UnauthenticatedError,
    ValidationError,
)
from authflow.services._shared.ports import (
    CredentialStore,
    MediaUploader,
    PasswordHasher,
    TokenDenylistStore,
    TokenIssuer,
    TokenKind,
    UserCandidate,
    UserRecord,
)
from authflow.services.auth.dto import (
    LoginIn,
    LoginOut,
    LogoutIn,
    RefreshIn,
    RegisterIn,
    TokenPairOut,
    UserPublicOut,
)

logger = logging.getLogger(__name__)


def _clean(value: str | None) -> str:
    return value.strip() if isinstance(value, str) else ""


class SessionManager(BaseService):
    """
    Password authentication and session issuance (register / login / refresh / logout).

    Every operation is a linear pipeline (validate, look up, verify or hash,
    mutate, respond) that short-circuits with a typed :class:`ServiceError`.

    The stored refresh token is the only shared mutable state. It is written
    through :meth:`CredentialStore.set_refresh_token` on login/logout and
    through the compare-and-swap :meth:`CredentialStore.swap_refresh_token`
    on refresh, so two concurrent refreshes with the same token cannot both
    succeed.

    Passwords, hashes and tokens are never logged.
    """

    def __init__(
        self,
        *,
        store: CredentialStore,
        hasher: PasswordHasher,
        tokens: TokenIssuer,
        uploader: MediaUploader,
        denylist: TokenDenylistStore | None = None,
    ) -> None:
        """
        Initialize the service with its collaborators.

        :param store: Credential persistence.
        :param hasher: Password hasher.
        :param tokens: Access/refresh token issuer.
        :param uploader: Media collaborator for avatar/cover uploads.
        :param denylist: Optional access-token denylist used on logout.
        """
        self.store = store
        self.hasher = hasher
        self.tokens = tokens
        self.uploader = uploader
        self.denylist = denylist

    # ------------------------------------------------------------------ #
    # Register
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> UserPublicOut:
        """
        Create a new user and return its sanitized view.

        :raises ValidationError: Missing/blank field or missing avatar.
        :raises ConflictError: Username or email already taken.
        :raises UploadFailedError: Media collaborator failed; nothing is created.
        :raises CreationFailedError: The store rejected the insert or was
            unreachable. Files uploaded for this call are discarded.
        """
        fields = {
            "username": _clean(dto.username),
            "email": _clean(dto.email),
            "fullname": _clean(dto.fullname),
            "password": _clean(dto.password),
        }
        missing = [name for name, value in fields.items() if not value]
        if missing:
            raise ValidationError("All fields are required", fields=missing)

        username = fields["username"].lower()
        email = fields["email"].lower()

        if self.store.find_by_identifier(username=username, email=email) is not None:
            raise ConflictError("User", "user already exists")

        if dto.avatar is None:
            raise ValidationError("Avatar file is required", fields=["avatar"])

        uploaded: list[str] = []
        try:
            avatar = self.uploader.upload(dto.avatar)
            uploaded.append(avatar)
            cover_image = ""
            if dto.cover_image is not None:
                cover_image = self.uploader.upload(dto.cover_image)
                uploaded.append(cover_image)

            candidate = UserCandidate(
                username=username,
                email=email,
                fullname=fields["fullname"],
                # the raw value is hashed; trimming only decides blankness
                password_hash=self.hasher.hash(dto.password),
                avatar=avatar,
                cover_image=cover_image,
            )
            try:
                record = self.store.create(candidate)
            except (DuplicateIdentifierError, StoreUnavailableError, ValueError) as exc:
                logger.warning(
                    "User creation rejected by store",
                    extra={"event": "auth.register", "outcome": type(exc).__name__},
                )
                raise CreationFailedError() from exc
        except Exception:
            for ref in uploaded:
                self.uploader.discard(ref)
            raise

        logger.info(
            "User registered",
            extra={"event": "auth.register", "user_id": record.id, "outcome": "success"},
        )
        return UserPublicOut.from_record(record)

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> LoginOut:
        """
        Verify credentials and issue a fresh token pair.

        :raises ValidationError: No identifier or no password.
        :raises NotFoundError: No user matches the identifier.
        :raises InvalidCredentialsError: Wrong password.
        :raises HashFormatError: The stored hash is unreadable.
        """
        username = _clean(dto.username) or None
        email = _clean(dto.email) or None
        if username is None and email is None:
            raise ValidationError("username or email is required", fields=["username", "email"])
        if not _clean(dto.password):
            raise ValidationError("password is required", fields=["password"])

        user = self.store.find_by_identifier(username=username, email=email)
        if user is None:
            raise NotFoundError("User", username or email or "")

        if not self.hasher.verify(dto.password, user.password_hash):
            logger.info(
                "Login rejected",
                extra={"event": "auth.login", "user_id": user.id, "outcome": "invalid_credentials"},
            )
            raise InvalidCredentialsError()

        pair = self._issue_pair(user)
        self.store.set_refresh_token(user.id, pair.refresh_token)

        logger.info(
            "User logged in",
            extra={"event": "auth.login", "user_id": user.id, "outcome": "success"},
        )
        return LoginOut(
            user=UserPublicOut.from_record(user),
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
        )

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Rotate the refresh token and emit a new token pair.

        Every rejection is an :class:`UnauthenticatedError`: missing token,
        failed verification, unknown user, token no longer current, or a lost
        race against a concurrent rotation.
        """
        presented = _clean(dto.refresh_token)
        if not presented:
            raise UnauthenticatedError("Refresh token is required")

        try:
            claims = self.tokens.verify(presented, TokenKind.REFRESH)
        except TokenInvalidError as exc:
            raise UnauthenticatedError("Invalid refresh token") from exc

        user_id = self._coerce_user_id(claims.get("id"))
        user = self.store.find_by_id(user_id)
        if user is None:
            raise UnauthenticatedError("Invalid refresh token")

        if user.refresh_token != presented:
            logger.info(
                "Stale refresh token presented",
                extra={"event": "auth.refresh", "user_id": user.id, "outcome": "stale"},
            )
            raise UnauthenticatedError("Refresh token is expired or used")

        pair = self._issue_pair(user)
        if not self.store.swap_refresh_token(user.id, expected=presented, new=pair.refresh_token):
            logger.info(
                "Refresh token rotated concurrently",
                extra={"event": "auth.refresh", "user_id": user.id, "outcome": "lost_race"},
            )
            raise UnauthenticatedError("Refresh token is expired or used")

        logger.info(
            "Session refreshed",
            extra={"event": "auth.refresh", "user_id": user.id, "outcome": "success"},
        )
        return pair

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> None:
        """
        Clear the stored refresh token. Idempotent for a known user.

        When the caller passes the access token's ``jti`` and expiry, that
        access token is also denylisted until it expires.

        :raises NotFoundError: Unknown user id.
        """
        if not self.store.set_refresh_token(dto.user_id, None):
            raise NotFoundError("User", dto.user_id)

        if self.denylist is not None and dto.access_jti and dto.access_expires_at:
            self.denylist.revoke_jti(jti=dto.access_jti, expires_at=dto.access_expires_at)

        logger.info(
            "User logged out",
            extra={"event": "auth.logout", "user_id": dto.user_id, "outcome": "success"},
        )

    # ------------------------------------------------------------------ #
    # Read helpers
    # ------------------------------------------------------------------ #

    def current_user(self, user_id: int) -> UserPublicOut:
        """
        Return the sanitized view of ``user_id``.

        :raises NotFoundError: Unknown user id.
        """
        user = self.store.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return UserPublicOut.from_record(user)

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    def _issue_pair(self, user: UserRecord) -> TokenPairOut:
        access = self.tokens.issue_access(
            {"id": user.id, "email": user.email, "username": user.username}
        )
        refresh = self.tokens.issue_refresh({"id": user.id})
        return TokenPairOut(access_token=access, refresh_token=refresh)

    @staticmethod
    def _coerce_user_id(value: Any) -> int:
        """Ensure the ``id`` claim can be treated as an integer user id."""
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str) and value.isdigit():
            return int(value)
        raise UnauthenticatedError("Invalid refresh token")
