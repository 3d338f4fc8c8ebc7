"""Unit tests for the in-memory port doubles used across the suite."""

from __future__ import annotations

import io
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime, timedelta

import pytest
from authflow.services._shared.errors import DuplicateIdentifierError
from authflow.services._shared.ports import (
    InMemoryCredentialStore,
    InMemoryDenylistStore,
    InMemoryMediaUploader,
    UserCandidate,
)
from freezegun import freeze_time
from werkzeug.datastructures import FileStorage


def _candidate(username="ada", email="ada@example.com") -> UserCandidate:
    return UserCandidate(
        username=username,
        email=email,
        fullname="Ada",
        password_hash="pbkdf2:sha256:1$s$d",
        avatar="memory://1/a.png",
    )


class TestInMemoryCredentialStore:
    def test_ids_are_sequential(self):
        store = InMemoryCredentialStore()

        assert store.create(_candidate()).id == 1
        assert store.create(_candidate("grace", "grace@example.com")).id == 2

    def test_uniqueness_ignores_case(self):
        store = InMemoryCredentialStore()
        store.create(_candidate())

        with pytest.raises(DuplicateIdentifierError) as exc_info:
            store.create(_candidate("ADA", "other@example.com"))
        assert exc_info.value.identifier == "username"

        with pytest.raises(DuplicateIdentifierError) as exc_info:
            store.create(_candidate("other", "Ada@Example.com"))
        assert exc_info.value.identifier == "email"

    def test_swap_has_a_single_winner_under_contention(self):
        store = InMemoryCredentialStore()
        user = store.create(_candidate())
        store.set_refresh_token(user.id, "rt-0")

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(
                pool.map(
                    lambda n: store.swap_refresh_token(user.id, expected="rt-0", new=f"rt-{n}"),
                    range(1, 9),
                )
            )

        assert results.count(True) == 1
        assert store.find_by_id(user.id).refresh_token != "rt-0"

    def test_unknown_user_writes_nothing(self):
        store = InMemoryCredentialStore()

        assert store.set_refresh_token(1, "rt") is False
        assert store.swap_refresh_token(1, expected="a", new="b") is False


class TestInMemoryDenylistStore:
    def test_revocation_lapses_with_the_token(self):
        store = InMemoryDenylistStore()
        with freeze_time("2026-01-01 12:00:00") as frozen:
            store.revoke_jti(jti="j1", expires_at=datetime.now(UTC) + timedelta(minutes=1))
            assert store.is_revoked("j1") is True

            frozen.tick(timedelta(minutes=2))
            assert store.is_revoked("j1") is False

    def test_unknown_jti(self):
        assert InMemoryDenylistStore().is_revoked("nope") is False


def test_in_memory_uploader_keeps_bytes():
    uploader = InMemoryMediaUploader()

    ref = uploader.upload(FileStorage(stream=io.BytesIO(b"abc"), filename="a.png"))

    assert ref == "memory://1/a.png"
    assert uploader.files[ref] == b"abc"


def test_in_memory_uploader_discard_forgets_the_file():
    uploader = InMemoryMediaUploader()
    first = uploader.upload(FileStorage(stream=io.BytesIO(b"abc"), filename="a.png"))

    uploader.discard(first)
    uploader.discard("memory://404/missing.png")
    second = uploader.upload(FileStorage(stream=io.BytesIO(b"def"), filename="a.png"))

    assert uploader.files == {second: b"def"}
    assert second != first
