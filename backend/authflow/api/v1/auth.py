"""Session endpoints: register, login, refresh, logout and the current user."""

from __future__ import annotations

from datetime import UTC, datetime

from flask import Blueprint, Response, current_app, request
from flask_jwt_extended import (
    get_jwt,
    get_jwt_identity,
    jwt_required,
    set_access_cookies,
    unset_jwt_cookies,
)
from werkzeug.datastructures import FileStorage

from authflow.api.deps import call_service, get_session_manager, json_response, timing
from authflow.schemas import (
    LoginResponseSchema,
    LoginSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
    UserSchema,
)
from authflow.services.auth.dto import LoginIn, LogoutIn, RefreshIn, RegisterIn

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
user_schema = UserSchema()
token_schema = TokenPairSchema()
login_out_schema = LoginResponseSchema()


def _uploaded(field: str) -> FileStorage | None:
    file = request.files.get(field)
    # browsers send an empty part when no file was picked
    return file if file is not None and file.filename else None


def _set_session_cookies(response: Response, *, access_token: str, refresh_token: str) -> None:
    cfg = current_app.config
    # also sets the readable CSRF cookie paired with the access token
    set_access_cookies(response, access_token, max_age=cfg["ACCESS_TOKEN_EXPIRES"])
    # set_refresh_cookies() would decode the token with the access secret
    response.set_cookie(
        cfg["JWT_REFRESH_COOKIE_NAME"],
        refresh_token,
        max_age=cfg["REFRESH_TOKEN_EXPIRES"],
        path=cfg["JWT_REFRESH_COOKIE_PATH"],
        domain=cfg.get("JWT_COOKIE_DOMAIN"),
        secure=cfg["JWT_COOKIE_SECURE"],
        httponly=True,
        samesite=cfg["JWT_COOKIE_SAMESITE"],
    )


@bp.post("/register")
@timing
def register():
    """Register a user from a multipart form with ``avatar``/``coverimage`` files."""

    data = register_schema.load(request.form.to_dict())
    dto = RegisterIn(
        username=data["username"],
        email=data["email"],
        fullname=data["fullname"],
        password=data["password"],
        avatar=_uploaded("avatar"),
        cover_image=_uploaded("coverimage"),
    )
    user = call_service(get_session_manager().register, dto)
    return json_response({"data": user_schema.dump(user)}, status=201)


@bp.post("/login")
@timing
def login():
    """Authenticate by username or email and set both session cookies."""

    data = login_schema.load(request.get_json(silent=True) or {})
    dto = LoginIn(password=data["password"], username=data["username"], email=data["email"])
    result = call_service(get_session_manager().login, dto)
    response = json_response({"data": login_out_schema.dump(result)})
    _set_session_cookies(
        response, access_token=result.access_token, refresh_token=result.refresh_token
    )
    return response


@bp.post("/refresh-token")
@timing
def refresh_token():
    """Rotate the refresh token presented in the cookie (or JSON body)."""

    body = refresh_schema.load(request.get_json(silent=True) or {})
    cookie_name = current_app.config["JWT_REFRESH_COOKIE_NAME"]
    presented = request.cookies.get(cookie_name) or body["refresh_token"]
    pair = call_service(get_session_manager().refresh, RefreshIn(refresh_token=presented))
    response = json_response({"data": token_schema.dump(pair)})
    _set_session_cookies(response, access_token=pair.access_token, refresh_token=pair.refresh_token)
    return response


@bp.post("/logout")
@jwt_required()
@timing
def logout():
    """Clear the stored refresh token, revoke this access token, drop cookies."""

    claims = get_jwt()
    dto = LogoutIn(
        user_id=int(get_jwt_identity()),
        access_jti=claims.get("jti"),
        access_expires_at=datetime.fromtimestamp(claims["exp"], UTC) if "exp" in claims else None,
    )
    call_service(get_session_manager().logout, dto)
    response = json_response({"data": {}, "message": "User logged out"})
    unset_jwt_cookies(response)
    return response


@bp.get("/me")
@jwt_required()
@timing
def me():
    """Return the authenticated user's public profile."""

    user = call_service(get_session_manager().current_user, int(get_jwt_identity()))
    return json_response({"data": user_schema.dump(user)})
