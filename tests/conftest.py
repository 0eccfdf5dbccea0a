"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
import tempfile
from pathlib import Path

# Minimal environment for Settings()
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("FALLBACK_PARTICIPANT_ID", "1")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("REDIS_HOST", "localhost")
os.environ.setdefault(
    "LOG_FILE", str(Path(tempfile.gettempdir()) / "payout_engine_test.log")
)

# Добавить корень проекта в PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from payout_engine.config.business_constants import REGISTRATION_AMOUNT
from payout_engine.config.database import create_session_maker
from payout_engine.models import (
    Base,
    Participant,
    PaymentSlip,
    PaymentSlipStatus,
)
from payout_engine.repositories.participant_repository import (
    ParticipantRepository,
)
from payout_engine.services.compensation_engine import CompensationEngine
from payout_engine.utils.datetime_utils import FixedClock

# Mid-month, so month boundaries are never crossed by accident
START = datetime(2026, 1, 15, 10, 0, tzinfo=UTC)


@pytest.fixture
def mock_session():
    """Mock AsyncSession for tests without a database."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def clock():
    """Clock frozen at START."""
    return FixedClock(START)


@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite engine with the full schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", poolclass=StaticPool
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(db_engine):
    """Database session for each test."""
    session_maker = create_session_maker(db_engine)
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def company(session):
    """Fallback participant receiving redirected income (ID 1)."""
    participant = Participant(referred_by=None, position=None)
    session.add(participant)
    await session.commit()
    return participant


@pytest.fixture
def engine(session, clock, company):
    """Compensation engine on the test session and clock."""
    return CompensationEngine(
        session, clock=clock, fallback_participant_id=company.id
    )


@pytest.fixture
def make_participant(session, clock):
    """
    Factory placing a participant in the tree (no income distributed).

    Returns:
        async callable(sponsor=None, position=None, **fields) -> Participant
    """

    async def _make(sponsor=None, position=None, **fields):
        participant = Participant(
            referred_by=sponsor.id if sponsor is not None else None,
            position=position,
            placed_at=clock.now(),
            **fields,
        )
        session.add(participant)
        await session.commit()
        return participant

    return _make


@pytest.fixture
def approved_slip(session, clock):
    """Factory for an approved payment slip."""

    async def _slip(participant, amount=REGISTRATION_AMOUNT):
        slip = PaymentSlip(
            participant_id=participant.id,
            amount=Decimal(amount),
            status=PaymentSlipStatus.APPROVED,
            approved_at=clock.now(),
        )
        session.add(slip)
        await session.commit()
        return slip

    return _slip


@pytest.fixture
def register(engine, make_participant, approved_slip):
    """
    Factory registering a participant: placement, approved slip and
    registration income.

    Returns:
        async callable(sponsor, position) -> (Participant, RegistrationResult)
    """

    async def _register(sponsor, position):
        participant = await make_participant(sponsor, position)
        await approved_slip(participant)
        result = await engine.distribute_registration_income(participant.id)
        return participant, result

    return _register


@pytest.fixture
def fresh(session):
    """Re-read a participant from the database."""
    repo = ParticipantRepository(session)

    async def _fresh(participant):
        return await repo.get_fresh(participant.id)

    return _fresh
