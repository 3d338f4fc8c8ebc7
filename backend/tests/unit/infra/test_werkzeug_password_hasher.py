"""Unit tests for WerkzeugPasswordHasher."""

from __future__ import annotations

import pytest
from authflow.infra.security.werkzeug_password_hasher import WerkzeugPasswordHasher
from authflow.services._shared.errors import HashFormatError


@pytest.fixture()
def hasher() -> WerkzeugPasswordHasher:
    return WerkzeugPasswordHasher(iterations=1_000)


def test_hash_is_salted(hasher):
    """The same password hashes to different values on every call."""
    first = hasher.hash("s3cret-pass")
    second = hasher.hash("s3cret-pass")

    assert first != second
    assert "s3cret-pass" not in first
    assert first.startswith("pbkdf2:sha256:1000$")


def test_verify_accepts_right_and_rejects_wrong_password(hasher):
    hashed = hasher.hash("s3cret-pass")

    assert hasher.verify("s3cret-pass", hashed) is True
    assert hasher.verify("wrong-pass", hashed) is False


def test_verify_is_independent_of_the_hasher_cost(hasher):
    """A hash produced with another cost factor still verifies."""
    stronger = WerkzeugPasswordHasher(iterations=2_000)
    hashed = stronger.hash("s3cret-pass")

    assert hasher.verify("s3cret-pass", hashed) is True


@pytest.mark.parametrize(
    "stored",
    [
        "",
        "plaintext-password",
        "pbkdf2:sha256:1000$onlysalt",
        "pbkdf2:sha256:notanumber$salt$deadbeef",
        "nosuchmethod$salt$deadbeef",
    ],
)
def test_malformed_hash_raises_instead_of_returning_false(hasher, stored):
    with pytest.raises(HashFormatError):
        hasher.verify("whatever", stored)


def test_hash_rejects_empty_password(hasher):
    with pytest.raises(ValueError):
        hasher.hash("")
