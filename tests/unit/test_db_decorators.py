"""Tests for rollback-on-error service decoration."""

import pytest
from sqlalchemy.exc import OperationalError

from payout_engine.utils.db_decorators import with_rollback_on_error
from payout_engine.utils.exceptions import (
    InvalidAmountError,
    TransactionAbortedError,
)


class _Service:
    def __init__(self, session, error=None):
        self.session = session
        self.error = error

    @with_rollback_on_error
    async def run(self):
        if self.error is not None:
            raise self.error
        return "done"


class TestWithRollbackOnError:
    """Test the decorator."""

    @pytest.mark.asyncio
    async def test_success_no_rollback(self, mock_session):
        result = await _Service(mock_session).run()

        assert result == "done"
        mock_session.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_store_error_wrapped(self, mock_session):
        """SQLAlchemy errors surface as TransactionAbortedError."""
        error = OperationalError("UPDATE participants", {}, Exception("locked"))

        with pytest.raises(TransactionAbortedError):
            await _Service(mock_session, error).run()

        mock_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_engine_error_propagates(self, mock_session):
        """Engine errors keep their type after rollback."""
        with pytest.raises(InvalidAmountError):
            await _Service(mock_session, InvalidAmountError("too small")).run()

        mock_session.rollback.assert_awaited_once()
