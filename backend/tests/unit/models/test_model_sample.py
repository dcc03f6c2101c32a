"""Tests for the Sample model."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from sqlalchemy import select

from samplecat.models import RefreshToken, Sample, User
from tests.factories.refresh_token import RefreshTokenFactory
from tests.factories.sample import SampleFactory
from tests.factories.user import UserFactory


class TestSample:
    def test_name_is_trimmed(self):
        s = Sample(name="  Granite  ", user_id=1)
        assert s.name == "Granite"

    @pytest.mark.parametrize("name", ["ab", "   ab  ", "x" * 101])
    def test_name_length_enforced(self, name):
        with pytest.raises(ValueError):
            Sample(name=name, user_id=1)

    def test_description_limit(self):
        Sample(name="Basalt", description="d" * 500, user_id=1)
        with pytest.raises(ValueError):
            Sample(name="Basalt", description="d" * 501, user_id=1)

    def test_is_owned_by(self, session):
        sample = SampleFactory()
        assert sample.is_owned_by(sample.user_id)
        assert not sample.is_owned_by(sample.user_id + 1)
        assert not sample.is_owned_by(None)


def test_deleting_user_cascades_to_samples_and_tokens(session):
    user = UserFactory()
    user_id = user.id
    SampleFactory.create_batch(2, owner=user)
    RefreshTokenFactory.create_batch(2, user=user)

    session.delete(user)
    session.commit()

    assert session.execute(select(Sample)).scalars().all() == []
    assert session.execute(select(RefreshToken)).scalars().all() == []
    assert session.get(User, user_id) is None


def test_refresh_token_expiry(session):
    token = RefreshTokenFactory(expired=True)
    assert token.is_expired(datetime.now(UTC)) is True
    fresh = RefreshTokenFactory()
    assert fresh.is_expired(datetime.now(UTC)) is False
