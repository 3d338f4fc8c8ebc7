"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP directly. Every error carries an HTTP-equivalent
``status_code`` and a stable ``code`` so the API layer can translate it
without a lookup table (see ``BaseService.translate_exceptions()``).
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, ClassVar

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_users_email').

    Returns
    -------
    bool
        True if the IntegrityError mentions the given constraint.

    Notes
    -----
    PostgreSQL reports the constraint name; SQLite only reports the
    ``table.column`` pair, so callers may pass either form.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return constraint_name.lower() in message


# --------------------------------------------------------------------------- #
# Base type
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors; ``status_code`` is only an equivalent.
    - ``retryable`` flags failures that are safe to retry automatically.
    """

    status_code: ClassVar[int] = 400
    code: ClassVar[str] = "bad_request"
    retryable: ClassVar[bool] = False

    def details(self) -> dict[str, Any]:
        """Return structured, client-safe context for the error."""
        return {}


# --------------------------------------------------------------------------- #
# Input / lookup errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class ValidationError(ServiceError):
    """
    Raised when required input is missing or blank.

    :param message: Human-readable summary.
    :type message: str
    :param fields: Names of the offending fields.
    :type fields: Sequence[str]
    """

    message: str
    fields: Sequence[str] = field(default_factory=tuple)

    status_code: ClassVar[int] = 400
    code: ClassVar[str] = "validation_error"

    def __str__(self) -> str:
        return self.message

    def details(self) -> dict[str, Any]:
        return {"missing_fields": list(self.fields)} if self.fields else {}


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the store.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    status_code: ClassVar[int] = 404
    code: ClassVar[str] = "not_found"

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a uniqueness rule is violated before reaching the store.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    status_code: ClassVar[int] = 409
    code: ClassVar[str] = "conflict"

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


@dataclass(slots=True)
class DuplicateIdentifierError(ServiceError):
    """
    Raised by a credential store when username or email is already taken.

    :param identifier: Which identifier collided (``"username"``, ``"email"``
        or ``"username_or_email"`` when the backend cannot tell).
    :type identifier: str
    """

    identifier: str

    status_code: ClassVar[int] = 409
    code: ClassVar[str] = "duplicate_identifier"

    def __str__(self) -> str:
        return f"Duplicate identifier: {self.identifier}"


# --------------------------------------------------------------------------- #
# Authentication errors
# --------------------------------------------------------------------------- #


class InvalidCredentialsError(ServiceError):
    """Raised when the password does not match the stored hash."""

    status_code: ClassVar[int] = 401
    code: ClassVar[str] = "invalid_credentials"

    def __init__(self, message: str = "Invalid user credentials") -> None:
        super().__init__(message)


class UnauthenticatedError(ServiceError):
    """Raised when a refresh token is missing, invalid, stale or revoked."""

    status_code: ClassVar[int] = 401
    code: ClassVar[str] = "unauthenticated"

    def __init__(self, message: str = "Unauthenticated request") -> None:
        super().__init__(message)


class TokenInvalidError(ServiceError):
    """
    Raised by the token issuer on bad signature, malformed token or expiry.

    The cause is deliberately not exposed: expired and tampered tokens are
    both simply unauthenticated.
    """

    status_code: ClassVar[int] = 401
    code: ClassVar[str] = "token_invalid"

    def __init__(self, message: str = "Invalid or expired token") -> None:
        super().__init__(message)


# --------------------------------------------------------------------------- #
# Infrastructure errors
# --------------------------------------------------------------------------- #


class UploadFailedError(ServiceError):
    """Raised when the media collaborator cannot store a file."""

    status_code: ClassVar[int] = 502
    code: ClassVar[str] = "upload_failed"

    def __init__(self, message: str = "Media upload failed") -> None:
        super().__init__(message)


class CreationFailedError(ServiceError):
    """Raised when the store rejects a user creation after validation passed."""

    status_code: ClassVar[int] = 500
    code: ClassVar[str] = "creation_failed"

    def __init__(self, message: str = "Something went wrong while creating the user") -> None:
        super().__init__(message)


class HashFormatError(ServiceError):
    """Raised when a stored password hash cannot be parsed."""

    status_code: ClassVar[int] = 500
    code: ClassVar[str] = "hash_format_error"

    def __init__(self, message: str = "Stored password hash is malformed") -> None:
        super().__init__(message)


class StoreUnavailableError(ServiceError):
    """Raised when the persistent store cannot be reached. Safe to retry."""

    status_code: ClassVar[int] = 503
    code: ClassVar[str] = "store_unavailable"
    retryable: ClassVar[bool] = True

    def __init__(self, message: str = "Credential store unavailable") -> None:
        super().__init__(message)
