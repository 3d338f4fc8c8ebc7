"""Authentication-related Marshmallow schemas.

Input schemas only check shape and length. Presence and blankness are the
session manager's call, so missing fields surface as a single
``validation_error`` listing every missing name.
"""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate, validates

from .user import UserSchema


class RegisterSchema(Schema):
    """Text fields of the multipart registration form."""

    class Meta:
        unknown = EXCLUDE

    username = fields.String(load_default="", validate=validate.Length(max=50))
    email = fields.String(load_default="", validate=validate.Length(max=254))
    fullname = fields.String(load_default="", validate=validate.Length(max=100))
    password = fields.String(load_default="", validate=validate.Length(max=128))

    @validates("email")
    def _check_email(self, value: str, **kwargs) -> None:
        # blank is reported by the session manager as a missing field
        if value.strip():
            validate.Email()(value.strip())


class LoginSchema(Schema):
    """Input payload for authenticating a user by username or email."""

    class Meta:
        unknown = EXCLUDE

    username = fields.String(load_default=None, allow_none=True, validate=validate.Length(max=50))
    email = fields.String(load_default=None, allow_none=True, validate=validate.Length(max=254))
    password = fields.String(load_default="", validate=validate.Length(max=128))


class RefreshSchema(Schema):
    """Optional JSON body for the refresh endpoint (the cookie wins)."""

    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.String(load_default=None, allow_none=True)


class TokenPairSchema(Schema):
    """Response payload containing a fresh token pair."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)


class LoginResponseSchema(TokenPairSchema):
    """Response payload for a successful login."""

    user = fields.Nested(UserSchema, required=True)


__all__ = [
    "RegisterSchema",
    "LoginSchema",
    "RefreshSchema",
    "TokenPairSchema",
    "LoginResponseSchema",
]
