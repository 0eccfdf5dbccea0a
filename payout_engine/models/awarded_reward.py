"""
AwardedReward model.

Milestone reached by a participant; each name is awarded at most once.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from payout_engine.models.base import Base
from payout_engine.models.types import MoneyType


class AwardedReward(Base):
    """
    AwardedReward entity.

    ``amount`` is the cash credited, or NULL for prizes (tours) and
    rank-only milestones; ``prize`` names the physical reward.
    """

    __tablename__ = "awarded_rewards"
    __table_args__ = (
        UniqueConstraint("participant_id", "name", name="uq_awarded_rewards_name"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    participant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("participants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    pairs_threshold: Mapped[int] = mapped_column(Integer, nullable=False)
    amount: Mapped[Decimal | None] = mapped_column(MoneyType, nullable=True)
    prize: Mapped[str | None] = mapped_column(String(100), nullable=True)

    awarded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<AwardedReward(participant_id={self.participant_id}, "
            f"name={self.name})>"
        )
