"""Unit tests for JWTTokenIssuer (PyJWT)."""

from __future__ import annotations

from datetime import timedelta

import jwt
import pytest
from authflow.infra.jwt.jwt_token_issuer import JWTTokenIssuer
from authflow.services._shared.errors import TokenInvalidError
from authflow.services._shared.ports import REGISTERED_CLAIMS, TokenKind
from freezegun import freeze_time

CLAIMS = {"id": 7, "email": "ada@example.com", "username": "ada"}


def test_access_round_trip_recovers_claims(issuer):
    token = issuer.issue_access(CLAIMS)

    payload = issuer.verify(token, TokenKind.ACCESS)

    assert {k: v for k, v in payload.items() if k not in REGISTERED_CLAIMS} == CLAIMS
    assert payload["sub"] == "7"
    assert payload["type"] == "access"
    assert payload["csrf"]


def test_refresh_carries_only_the_id(issuer):
    token = issuer.issue_refresh(CLAIMS)

    payload = issuer.verify(token, TokenKind.REFRESH)

    assert {k: v for k, v in payload.items() if k not in REGISTERED_CLAIMS} == {"id": 7}
    assert "csrf" not in payload


def test_tokens_are_unique_even_within_the_same_second(issuer):
    with freeze_time("2026-01-01 12:00:00"):
        first = issuer.issue_refresh({"id": 1})
        second = issuer.issue_refresh({"id": 1})

    assert first != second


def test_access_token_expires(issuer):
    with freeze_time("2026-01-01 12:00:00") as frozen:
        token = issuer.issue_access(CLAIMS)
        frozen.tick(timedelta(seconds=899))
        assert issuer.verify(token, TokenKind.ACCESS)["id"] == 7

        frozen.tick(timedelta(seconds=2))
        with pytest.raises(TokenInvalidError):
            issuer.verify(token, TokenKind.ACCESS)


def test_refresh_outlives_access(issuer):
    with freeze_time("2026-01-01 12:00:00") as frozen:
        refresh = issuer.issue_refresh(CLAIMS)
        frozen.tick(timedelta(days=1))
        assert issuer.verify(refresh, TokenKind.REFRESH)["id"] == 7


def test_kinds_are_not_interchangeable(issuer):
    """Each kind has its own secret, so a refresh token never passes as access."""
    access = issuer.issue_access(CLAIMS)
    refresh = issuer.issue_refresh(CLAIMS)

    with pytest.raises(TokenInvalidError):
        issuer.verify(refresh, TokenKind.ACCESS)
    with pytest.raises(TokenInvalidError):
        issuer.verify(access, TokenKind.REFRESH)


def test_wrong_type_claim_is_rejected(issuer):
    forged = jwt.encode(
        {"id": 7, "sub": "7", "type": "access", "jti": "x", "iat": 1, "exp": 4102444800},
        issuer.refresh_secret,
        algorithm="HS256",
    )
    with pytest.raises(TokenInvalidError):
        issuer.verify(forged, TokenKind.REFRESH)


@pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
def test_malformed_tokens_are_rejected(issuer, token):
    with pytest.raises(TokenInvalidError):
        issuer.verify(token, TokenKind.ACCESS)


def test_tampered_payload_is_rejected(issuer):
    header, _, signature = issuer.issue_access(CLAIMS).split(".")
    other_payload = issuer.issue_access({**CLAIMS, "id": 8}).split(".")[1]

    with pytest.raises(TokenInvalidError):
        issuer.verify(f"{header}.{other_payload}.{signature}", TokenKind.ACCESS)


def test_missing_claims_cannot_be_issued(issuer):
    with pytest.raises(ValueError):
        issuer.issue_access({"id": 7})


def test_from_config_requires_distinct_secrets():
    with pytest.raises(RuntimeError):
        JWTTokenIssuer.from_config(
            {
                "ACCESS_TOKEN_SECRET": "same",
                "REFRESH_TOKEN_SECRET": "same",
                "ACCESS_TOKEN_EXPIRES": 60,
                "REFRESH_TOKEN_EXPIRES": 120,
            }
        )
