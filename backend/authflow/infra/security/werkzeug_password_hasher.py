# authflow/infra/security/werkzeug_password_hasher.py
from __future__ import annotations

from dataclasses import dataclass, field

from werkzeug.security import check_password_hash, generate_password_hash

from authflow.services._shared.errors import HashFormatError
from authflow.services._shared.ports import PasswordHasher


@dataclass(slots=True)
class WerkzeugPasswordHasher(PasswordHasher):
    """
    Salted PBKDF2 hashing backed by ``werkzeug.security``.

    :param method: Werkzeug method prefix, e.g. ``"pbkdf2:sha256"``.
    :param iterations: Cost factor appended to ``method``; ``None`` keeps the
        method string as-is (useful for ``"scrypt:n:r:p"``).
    :param salt_length: Random salt length; every ``hash`` call draws a new one.

    Stored values look like ``pbkdf2:sha256:600000$<salt>$<hex digest>``.
    """

    method: str = "pbkdf2:sha256"
    iterations: int | None = 600_000
    salt_length: int = 16
    _full_method: str = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._full_method = (
            f"{self.method}:{self.iterations}" if self.iterations else self.method
        )

    def hash(self, plaintext: str) -> str:
        if not isinstance(plaintext, str) or not plaintext:
            raise ValueError("Password must be a non-empty string.")
        return generate_password_hash(
            plaintext, method=self._full_method, salt_length=self.salt_length
        )

    def verify(self, plaintext: str, hashed: str) -> bool:
        # check_password_hash returns False for an unsplittable hash, which
        # would read as "wrong password"; reject the shape up front instead.
        parts = hashed.split("$", 2) if isinstance(hashed, str) else []
        if len(parts) != 3 or not all(parts):
            raise HashFormatError()
        try:
            return bool(check_password_hash(hashed, plaintext))
        except ValueError as exc:
            # unknown method, bad cost parameter or unsupported digest
            raise HashFormatError() from exc
