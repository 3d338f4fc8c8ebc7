from __future__ import annotations

from typing import IO, Protocol


class MediaSource(Protocol):
    """
    Minimal file-handle contract, satisfied by ``werkzeug.datastructures.FileStorage``.

    :ivar filename: Client-supplied file name (untrusted).
    :ivar stream: Readable binary stream with the file contents.
    """

    filename: str | None
    stream: IO[bytes]


class MediaUploader(Protocol):
    """Port for turning an uploaded file into a durable media reference."""

    def upload(self, source: MediaSource) -> str:
        """
        Store ``source`` and return its public reference (URL or path).

        :raises UploadFailedError: If the file cannot be stored.
        """

    def discard(self, ref: str) -> None:
        """Remove a previously uploaded file. Unknown references are ignored."""


class InMemoryMediaUploader(MediaUploader):
    """Keep uploaded bytes in a dict; references look like ``memory://<n>/<name>``."""

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self._count = 0

    def upload(self, source: MediaSource) -> str:
        self._count += 1
        ref = f"memory://{self._count}/{source.filename or 'upload'}"
        self.files[ref] = source.stream.read()
        return ref

    def discard(self, ref: str) -> None:
        self.files.pop(ref, None)
