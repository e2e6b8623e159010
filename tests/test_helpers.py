"""Tests for timestamp parsing and the unit-of-work decorator."""

from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from learnhub.errors import ConcurrencyConflict, ValidationError
from learnhub.models import User
from learnhub.utils import as_utc, atomic, parse_datetime


class TestParseDatetime:
    def test_iso_with_z(self):
        parsed = parse_datetime("2024-05-01T12:30:00Z")
        assert parsed == datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)

    def test_epoch_millis(self):
        assert parse_datetime(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_empty_is_none(self):
        assert parse_datetime(None) is None
        assert parse_datetime("") is None

    @pytest.mark.parametrize("value", ["yesterday", True])
    def test_rejects_garbage(self, value):
        with pytest.raises(ValidationError):
            parse_datetime(value, "availableFrom")

    def test_naive_is_treated_as_utc(self):
        assert as_utc(datetime(2024, 1, 1)).tzinfo is not None


class TestAtomic:
    def test_commits_on_success(self, session):
        @atomic
        def create(session):
            user = User(email="a@example.com", first_name="A", last_name="B", role="tutor")
            session.add(user)
            return user

        create(session)
        session.expunge_all()
        assert session.query(User).count() == 1

    def test_rolls_back_on_error(self, session):
        @atomic
        def create_then_fail(session):
            session.add(User(email="a@example.com", first_name="A", last_name="B", role="tutor"))
            session.flush()
            raise ValidationError("nope")

        with pytest.raises(ValidationError):
            create_then_fail(session)
        assert session.query(User).count() == 0

    @pytest.mark.parametrize("error", [
        IntegrityError("INSERT", {}, Exception("unique")),
        StaleDataError("version mismatch"),
    ])
    def test_write_races_become_conflicts(self, session, error):
        @atomic
        def racing(session):
            raise error

        with pytest.raises(ConcurrencyConflict):
            racing(session)
