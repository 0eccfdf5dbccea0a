"""
PaymentSlip model.

Uploaded payment proof approved by an operator; the first approved slip is
the registration payment, later ones are investments.
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


class PaymentSlipStatus:
    """Payment slip status constants."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PaymentSlip(Base):
    """
    PaymentSlip entity.

    ``income_processed`` is set in the same transaction that distributes the
    slip's income and makes registration distribution idempotent.
    """

    __tablename__ = "payment_slips"
    __table_args__ = (
        Index("idx_payment_slips_participant_status", "participant_id", "status"),
        CheckConstraint("amount > 0", name="check_payment_slip_amount_positive"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    participant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("participants.id", ondelete="RESTRICT"),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=PaymentSlipStatus.PENDING, nullable=False
    )
    income_processed: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )

    approved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<PaymentSlip(id={self.id}, participant_id={self.participant_id}, "
            f"amount={self.amount}, status={self.status})>"
        )
