import pytest
from authflow.models.user import User
from authflow.uow import SQLAlchemyReadOnlyUnitOfWork as ROuow
from authflow.uow import SQLAlchemyUnitOfWork as RWuow
from sqlalchemy import select

from tests.factories.user import UserFactory


class TestSQLAlchemyUnitOfWork:
    def test_commits_on_success(self, app, session):
        with RWuow() as uow:
            uow.users.add(UserFactory.build(username="committed"))

        assert session.execute(select(User).where(User.username == "committed")).scalar_one()

    def test_rolls_back_on_error(self, app, session):
        with pytest.raises(RuntimeError), RWuow() as uow:
            uow.users.add(UserFactory.build(username="rolled-back"))
            raise RuntimeError("boom")

        found = session.execute(select(User).where(User.username == "rolled-back")).first()
        assert found is None


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_allows_reads(self, app, session):
        with RWuow() as uow:
            uow.users.add(UserFactory.build(username="reader"))

        with ROuow() as uow:
            assert uow.users.get_by_username_or_email(username="reader") is not None

    def test_blocks_orm_flush_writes(self, app, session):
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            uow.session.add(UserFactory.build())
            uow.session.flush()

    def test_disallows_commit(self, app, session):
        with ROuow() as uow, pytest.raises(RuntimeError, match="does not allow commit"):
            uow.commit()
