"""
Unit tests for SQLAlchemyReadOnlyUnitOfWork.
"""

from __future__ import annotations

import pytest
from sqlalchemy import text

from samplecat.uow import SQLAlchemyReadOnlyUnitOfWork
from tests.factories.user import UserFactory


class TestReadOnlyUnitOfWork:
    def test_reads_work(self, app, db, session):
        user = UserFactory(username="reader")
        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            assert uow.users.get_by_username("reader").id == user.id

    def test_orm_flush_is_blocked(self, app, db, session):
        user = UserFactory()
        with pytest.raises(RuntimeError, match="flush blocked"), SQLAlchemyReadOnlyUnitOfWork() as uow:
            row = uow.users.get(user.id)
            row.full_name = "changed"
            uow.session.flush()

    def test_raw_dml_is_blocked(self, app, db, session):
        with pytest.raises(RuntimeError, match="SQL statement blocked"), SQLAlchemyReadOnlyUnitOfWork() as uow:
            uow.session.execute(text("DELETE FROM users"))

    def test_commit_is_refused(self, app, db, session):
        with SQLAlchemyReadOnlyUnitOfWork() as uow, pytest.raises(RuntimeError):
            uow.commit()

    def test_changes_are_discarded_on_exit(self, app, db, session):
        user = UserFactory(full_name="Original")
        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            uow.users.get(user.id).full_name = "Mutated"
        session.expire_all()
        assert session.get(type(user), user.id).full_name == "Original"

    def test_guards_removed_after_exit(self, app, db, session):
        with SQLAlchemyReadOnlyUnitOfWork():
            pass
        # Writes work again once the read-only block is over.
        UserFactory()
