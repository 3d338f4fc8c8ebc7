"""Unit tests for LocalMediaUploader."""

from __future__ import annotations

import io

import pytest
from authflow.infra.media.local_media_uploader import LocalMediaUploader
from authflow.services._shared.errors import UploadFailedError
from werkzeug.datastructures import FileStorage


def _file(name: str, content: bytes) -> FileStorage:
    return FileStorage(stream=io.BytesIO(content), filename=name)


def test_upload_stores_file_and_returns_reference(tmp_path):
    uploader = LocalMediaUploader(tmp_path / "media", base_url="/media/")

    ref = uploader.upload(_file("me.png", b"png-bytes"))

    assert ref.startswith("/media/")
    stored = tmp_path / "media" / ref.rsplit("/", 1)[1]
    assert stored.read_bytes() == b"png-bytes"
    assert stored.name.endswith("-me.png")


def test_same_client_name_never_overwrites(tmp_path):
    uploader = LocalMediaUploader(tmp_path)

    first = uploader.upload(_file("me.png", b"one"))
    second = uploader.upload(_file("me.png", b"two"))

    assert first != second
    assert len(list(tmp_path.iterdir())) == 2


def test_client_filename_is_sanitized(tmp_path):
    uploader = LocalMediaUploader(tmp_path / "media")

    ref = uploader.upload(_file("../../etc/passwd", b"x"))

    assert ".." not in ref
    assert all(p.parent == tmp_path / "media" for p in (tmp_path / "media").iterdir())


def test_empty_file_fails_and_leaves_nothing(tmp_path):
    uploader = LocalMediaUploader(tmp_path)

    with pytest.raises(UploadFailedError):
        uploader.upload(_file("empty.png", b""))
    assert list(tmp_path.iterdir()) == []


def test_unwritable_root_raises_upload_failed(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file in the way")
    uploader = LocalMediaUploader(blocker / "media")

    with pytest.raises(UploadFailedError):
        uploader.upload(_file("me.png", b"x"))


def test_discard_removes_the_stored_file(tmp_path):
    uploader = LocalMediaUploader(tmp_path, base_url="/media")
    ref = uploader.upload(_file("me.png", b"png-bytes"))

    uploader.discard(ref)

    assert list(tmp_path.iterdir()) == []


def test_discard_ignores_foreign_and_unsafe_references(tmp_path):
    outside = tmp_path / "keep.txt"
    outside.write_text("keep")
    uploader = LocalMediaUploader(tmp_path / "media", base_url="/media")
    ref = uploader.upload(_file("me.png", b"x"))

    uploader.discard("https://cdn.example.com/me.png")
    uploader.discard("/media/../keep.txt")
    uploader.discard("/media/already-gone.png")

    assert outside.read_text() == "keep"
    assert (tmp_path / "media" / ref.rsplit("/", 1)[1]).exists()
