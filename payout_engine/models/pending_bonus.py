"""
PendingBonus model.

One deferred monthly investment bonus owed to an ancestor.
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


class PendingBonus(Base):
    """
    PendingBonus entity.

    Created six at a time (``month`` 1..6) per eligible ancestor when an
    investment is approved. Rows sharing ``investment_id`` form one release
    group; ``created_at`` is the start of the approval month and anchors the
    elapsed-month count. A release stamps ``last_release_period`` on the
    group's remaining rows so a group releases at most once per period.
    Awarded rows are purged by settlement.
    """

    __tablename__ = "pending_bonuses"
    __table_args__ = (
        Index("idx_pending_bonuses_owner_awarded", "owner_id", "awarded"),
        Index("idx_pending_bonuses_group", "owner_id", "investment_id", "month"),
        CheckConstraint(
            "month >= 1 AND month <= 6", name="check_pending_bonus_month_range"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Ancestor receiving the bonus
    owner_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("participants.id", ondelete="CASCADE"),
        nullable=False,
    )
    investor_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("participants.id", ondelete="RESTRICT"),
        nullable=False,
    )
    investment_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("investments.id", ondelete="SET NULL"),
        nullable=True,
        comment="Release group key; NULL for legacy rows",
    )

    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)

    awarded: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    awarded_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_release_period: Mapped[str | None] = mapped_column(
        String(7),
        nullable=True,
        comment="YYYY-MM of the group's last release",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<PendingBonus(id={self.id}, owner_id={self.owner_id}, "
            f"investment_id={self.investment_id}, month={self.month}, "
            f"awarded={self.awarded})>"
        )
