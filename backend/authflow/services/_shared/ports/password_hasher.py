from __future__ import annotations

from typing import Protocol


class PasswordHasher(Protocol):
    """
    Port for one-way, salted password hashing.

    ``hash`` MUST produce a different value for identical input on every call
    (fresh salt); ``verify`` MUST raise ``HashFormatError`` instead of returning
    ``False`` when the stored value cannot be parsed.
    """

    def hash(self, plaintext: str) -> str: ...

    def verify(self, plaintext: str, hashed: str) -> bool: ...
