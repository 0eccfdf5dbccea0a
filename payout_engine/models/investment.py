"""
Investment model.

Principal locked in for a fixed number of months and amortised by monthly ROI.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from payout_engine.models.base import Base
from payout_engine.models.types import MoneyType


class Investment(Base):
    """
    Investment entity.

    ``is_locked`` and ``withdrawal_restriction`` are derived values kept for
    reporting; the status service recomputes them from ``end_date``.
    ``last_roi_period`` (``YYYY-MM``) marks the period already paid so a
    repeated settlement run pays nothing twice.
    """

    __tablename__ = "investments"
    __table_args__ = (
        Index("idx_investments_active", "active", "last_roi_period"),
        CheckConstraint("amount > 0", name="check_investment_amount_positive"),
        CheckConstraint(
            "months_paid >= 0 AND months_paid <= lock_in_months",
            name="check_investment_months_paid_range",
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Owner
    participant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("participants.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)

    # Lock-in window
    start_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    end_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    lock_in_months: Mapped[int] = mapped_column(
        Integer, default=24, nullable=False
    )

    # Amortisation
    months_paid: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False, index=True
    )
    last_roi_period: Mapped[str | None] = mapped_column(
        String(7),
        nullable=True,
        comment="YYYY-MM of the last ROI payout",
    )

    # Derived status
    is_locked: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    withdrawal_restriction: Mapped[Decimal] = mapped_column(
        MoneyType,
        default=Decimal("0"),
        nullable=False,
        comment="Principal that cannot be withdrawn while locked",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Investment(id={self.id}, participant_id={self.participant_id}, "
            f"amount={self.amount}, months_paid={self.months_paid}, "
            f"active={self.active})>"
        )
