"""
DailyPairCount model.

Matching pairs paid to a participant per UTC day (the daily cap source).
"""

from datetime import date

from sqlalchemy import Date, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from payout_engine.models.base import Base


class DailyPairCount(Base):
    """Pairs paid to one participant on one day."""

    __tablename__ = "daily_pair_counts"
    __table_args__ = (
        UniqueConstraint("participant_id", "day", name="uq_daily_pair_counts_day"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    participant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("participants.id", ondelete="CASCADE"),
        nullable=False,
    )
    day: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<DailyPairCount(participant_id={self.participant_id}, "
            f"day={self.day}, count={self.count})>"
        )
