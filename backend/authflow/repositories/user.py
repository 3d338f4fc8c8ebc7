"""User repository for identity lookups and refresh-token writes."""

from __future__ import annotations

from typing import Any, cast

from sqlalchemy import CursorResult, func, or_, select, update

from authflow.models.base import utcnow
from authflow.models.user import User
from authflow.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    It NEVER hashes passwords or signs tokens; it only stores what the
    session manager hands it.
    """

    model = User

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_username_or_email(
        self, *, username: str | None = None, email: str | None = None
    ) -> User | None:
        """Fetch a user matching ``username`` OR ``email`` (case-insensitive).

        :param username: Username to normalise and search.
        :type username: str | None
        :param email: Email address to normalise and search.
        :type email: str | None
        :returns: User instance or ``None`` when nothing matches (or when
            both identifiers are blank).
        :rtype: User | None
        """
        clauses = []
        if username and username.strip():
            clauses.append(func.lower(User.username) == username.strip().lower())
        if email and email.strip():
            clauses.append(func.lower(User.email) == email.strip().lower())
        if not clauses:
            return None
        stmt = select(User).where(or_(*clauses)).order_by(User.id.asc())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    # ---------------------------- Refresh token ----------------------------

    def _update_refresh_token(self, user_id: int, token: str | None, *conditions: Any) -> bool:
        stmt = (
            update(User)
            .where(User.id == user_id, *conditions)
            .values(refresh_token=token, updated_at=utcnow())
            .execution_options(synchronize_session="fetch")
        )
        result = cast(CursorResult[Any], self.session.execute(stmt))
        return result.rowcount == 1

    def set_refresh_token(self, user_id: int, token: str | None) -> bool:
        """Store (or clear with ``None``) the refresh token unconditionally.

        :returns: ``True`` if the user row exists.
        """
        return self._update_refresh_token(user_id, token)

    def compare_and_set_refresh_token(self, user_id: int, *, expected: str, new: str) -> bool:
        """Swap the refresh token only if the stored one equals ``expected``.

        A single conditional ``UPDATE`` keeps the check and the write atomic
        at the database level; concurrent callers racing on the same
        ``expected`` value see exactly one ``rowcount == 1``.

        :returns: ``True`` if the swap happened.
        """
        return self._update_refresh_token(user_id, new, User.refresh_token == expected)
