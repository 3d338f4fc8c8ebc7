"""Unit tests for UserRepository."""

import pytest
from authflow.repositories.user import UserRepository

from tests.factories.user import UserFactory


class TestUserRepository:
    """Ensure ``UserRepository`` performs identity lookups and token writes."""

    @pytest.fixture()
    def repo(self):
        return UserRepository()

    def test_get_by_username_or_email(self, repo, session):
        """Either identifier finds the user, regardless of case."""
        u = UserFactory(email="alice@example.com", username="alice")
        session.commit()

        assert repo.get_by_username_or_email(username="ALICE").id == u.id
        assert repo.get_by_username_or_email(email=" Alice@Example.com ").id == u.id
        assert repo.get_by_username_or_email(username="bob", email="alice@example.com").id == u.id
        assert repo.get_by_username_or_email(username="bob") is None

    def test_blank_identifiers_match_nothing(self, repo, session):
        UserFactory()
        session.commit()

        assert repo.get_by_username_or_email() is None
        assert repo.get_by_username_or_email(username="  ", email="") is None

    def test_set_refresh_token(self, repo, session):
        u = UserFactory()
        session.commit()

        assert repo.set_refresh_token(u.id, "rt-1") is True
        session.commit()

        assert repo.get(u.id).refresh_token == "rt-1"
        assert repo.set_refresh_token(u.id + 1000, "rt-x") is False

    def test_compare_and_set_refresh_token(self, repo, session):
        u = UserFactory(refresh_token="rt-1")
        session.commit()

        assert repo.compare_and_set_refresh_token(u.id, expected="stale", new="rt-2") is False
        assert repo.compare_and_set_refresh_token(u.id, expected="rt-1", new="rt-2") is True
        assert repo.compare_and_set_refresh_token(u.id, expected="rt-1", new="rt-3") is False
        session.commit()

        assert repo.get(u.id).refresh_token == "rt-2"

    def test_get_by_primary_key(self, repo, session):
        carol = UserFactory(username="carol")
        session.commit()

        assert repo.get(carol.id).username == "carol"
        assert repo.get(carol.id + 1000) is None
