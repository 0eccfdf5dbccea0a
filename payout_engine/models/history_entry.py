"""
HistoryEntry model.

Append-only audit trail of every wallet credit.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from payout_engine.models.base import Base
from payout_engine.models.types import MoneyType


class HistoryType:
    """History entry type tags."""

    REFERRAL = "referral"
    MATCHING = "matching"
    REWARD = "reward"
    INVESTMENT_REFERRAL = "investment-referral"
    MONTHLY_INVESTMENT_BONUS = "monthly-investment-bonus"
    INVESTMENT_ROI = "investment-roi"

    # Income redirected to the fallback participant
    EXTRA_REFERRAL = "extra-referral"
    EXTRA_MATCHING = "extra-matching"
    EXTRA_INVESTMENT_REFERRAL = "extra-investment-referral"
    EXTRA_MONTHLY_INVESTMENT_BONUS = "extra-monthly-investment-bonus"

    @staticmethod
    def redirected(history_type: str) -> str:
        """Get the redirect variant of a type."""
        return f"extra-{history_type}"


class HistoryStatus:
    """History entry status constants."""

    COMPLETED = "completed"
    PENDING = "pending"


class HistoryEntry(Base):
    """
    HistoryEntry entity.

    Rows are inserted by the engine and never updated by it.
    """

    __tablename__ = "history_entries"
    __table_args__ = (
        Index("idx_history_participant_type", "participant_id", "type"),
        Index("idx_history_created", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    participant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("participants.id", ondelete="RESTRICT"),
        nullable=False,
    )
    type: Mapped[str] = mapped_column(String(40), nullable=False)
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=HistoryStatus.COMPLETED, nullable=False
    )
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<HistoryEntry(id={self.id}, participant_id={self.participant_id}, "
            f"type={self.type}, amount={self.amount})>"
        )
