import pytest
from decimal import Decimal
from unittest.mock import Mock

from sqlalchemy.orm.exc import StaleDataError

from barberapi.core.exceptions import ConflictError
from barberapi.database.session import run_in_transaction, session_scope
from barberapi.models import Member


class TestSessionScope:
    def test_commits_on_success(self):
        db = Mock()
        with session_scope(lambda: db) as session:
            assert session is db

        db.commit.assert_called_once()
        db.rollback.assert_not_called()
        db.close.assert_called_once()

    def test_rolls_back_and_reraises_on_error(self):
        db = Mock()
        with pytest.raises(RuntimeError):
            with session_scope(lambda: db):
                raise RuntimeError("boom")

        db.commit.assert_not_called()
        db.rollback.assert_called_once()
        db.close.assert_called_once()


class TestRunInTransaction:
    """버전 충돌 재시도 테스트"""

    def test_retries_stale_data_then_succeeds(self):
        work = Mock(side_effect=[StaleDataError("stale"), "ok"])

        result = run_in_transaction(Mock, work, max_attempts=3)

        assert result == "ok"
        assert work.call_count == 2

    def test_raises_conflict_after_max_attempts(self):
        work = Mock(side_effect=StaleDataError("stale"))

        with pytest.raises(ConflictError) as exc_info:
            run_in_transaction(Mock, work, max_attempts=3, label="recharge")

        assert work.call_count == 3
        assert exc_info.value.status_code == 409
        assert exc_info.value.details == {"attempts": 3}

    def test_other_errors_are_not_retried(self):
        work = Mock(side_effect=ValueError("bad"))

        with pytest.raises(ValueError):
            run_in_transaction(Mock, work, max_attempts=3)
        assert work.call_count == 1


class TestMemberVersioning:
    def test_concurrent_member_update_is_detected(self, session_factory, make_member):
        member_id = make_member(balance="100")

        first = session_factory()
        second = session_factory()
        try:
            stale = first.get(Member, member_id)
            fresh = second.get(Member, member_id)

            fresh.balance = fresh.balance + Decimal("50")
            second.commit()

            stale.balance = stale.balance - Decimal("30")
            with pytest.raises(StaleDataError):
                first.flush()
        finally:
            first.rollback()
            first.close()
            second.close()
