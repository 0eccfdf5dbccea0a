"""
Participant model.

A node of the binary referral tree together with its income buckets.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
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


class LegPosition:
    """Binary leg a participant occupies under its sponsor."""

    LEFT = "left"
    RIGHT = "right"


# Income buckets credited by the engine, in ledger order
INCOME_BUCKETS = (
    "referral_income",
    "matching_income",
    "reward_income",
    "investment_referral_income",
    "investment_referral_principal_income",
    "investment_referral_return_income",
    "investment_income",
)


class Participant(Base):
    """
    Participant entity.

    Children are not stored as lists: the left and right legs of a
    participant are the rows whose ``referred_by`` points at it, split by
    ``position`` and ordered by ``placed_at``. Rows are never deleted, so
    both legs only ever grow.

    Attributes:
        id: Primary key
        referred_by: Sponsor (direct parent) ID
        position: Leg under the sponsor (left/right)
        placed_at: Placement time, orders the leg lists
        direct_referral_count: Denormalised direct children counter
        pairs: Pairs already consumed by matching (never decreases)
        total_pairs: Lifetime paid pairs, feeds milestones (never decreases)
        referral_income .. investment_income: Income buckets
        referral_investment_principal: Downline principal that paid
            one-time investment bonuses to this participant
        total_investment: Principal invested by this participant
        wallet_balance: Withdrawable balance
    """

    __tablename__ = "participants"
    __table_args__ = (
        Index("idx_participants_sponsor_position", "referred_by", "position"),
        CheckConstraint("pairs >= 0", name="check_participant_pairs_non_negative"),
        CheckConstraint(
            "total_pairs >= 0", name="check_participant_total_pairs_non_negative"
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Tree placement
    referred_by: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("participants.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    position: Mapped[str | None] = mapped_column(
        String(5),
        nullable=True,
        comment="Leg under the sponsor: left or right",
    )
    placed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    # Counters
    direct_referral_count: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    pairs: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
        comment="Pairs formed at this node and consumed by matching",
    )
    total_pairs: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
        comment="Lifetime paid pairs (milestone source)",
    )

    # Income buckets
    referral_income: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    matching_income: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    reward_income: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    investment_referral_income: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    investment_referral_principal_income: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    investment_referral_return_income: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    investment_income: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    referral_investment_principal: Mapped[Decimal] = mapped_column(
        MoneyType,
        default=Decimal("0"),
        nullable=False,
        comment="Downline principal behind one-time investment bonuses",
    )
    total_investment: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    wallet_balance: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Participant(id={self.id}, referred_by={self.referred_by}, "
            f"position={self.position}, pairs={self.pairs}, "
            f"wallet={self.wallet_balance})>"
        )
