"""
Eligibility-gated credit batch.

Referral, matching and investment bonuses share one rule: an ineligible
ancestor's amount is not dropped but credited to the fallback participant
under the ``extra-`` variant of the history type. Credits are queued and
written by ``apply()`` as one bulk UPDATE and one bulk history INSERT.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from payout_engine.models.history_entry import HistoryStatus, HistoryType
from payout_engine.repositories.participant_repository import (
    ParticipantRepository,
)
from payout_engine.services.history_service import HistoryService
from payout_engine.utils.exceptions import NotFoundError


@dataclass
class QueuedCredit:
    """One queued credit, kept for logging and tests."""

    recipient_id: int
    origin_id: int
    level: int
    amount: Decimal
    history_type: str
    redirected: bool


class GatedCreditBatch:
    """
    Collects credits for one distribution event.

    Example:
        batch = GatedCreditBatch(session, fallback_id, now)
        batch.credit(ancestor.id, level, amount, ("referral_income",),
                     HistoryType.REFERRAL, "Level 1 referral", eligible)
        await batch.apply()
    """

    def __init__(
        self,
        session: AsyncSession,
        fallback_participant_id: int,
        now: datetime,
    ) -> None:
        """
        Initialize batch.

        Args:
            session: Async database session
            fallback_participant_id: Receiver of redirected income
            now: Event time written to history entries
        """
        self.participant_repo = ParticipantRepository(session)
        self.history_service = HistoryService(session)
        self.fallback_participant_id = fallback_participant_id
        self.now = now

        self._deltas: dict[int, dict[str, Any]] = defaultdict(
            lambda: defaultdict(Decimal)
        )
        self._history: list[dict[str, Any]] = []
        self.credits: list[QueuedCredit] = []

    @property
    def credited_count(self) -> int:
        """Credits paid to their intended recipient."""
        return sum(1 for c in self.credits if not c.redirected)

    @property
    def redirected_count(self) -> int:
        """Credits redirected to the fallback participant."""
        return sum(1 for c in self.credits if c.redirected)

    def credit(
        self,
        recipient_id: int,
        level: int,
        amount: Decimal,
        buckets: tuple[str, ...],
        history_type: str,
        remarks: str,
        eligible: bool,
        reason: str = "not eligible",
    ) -> bool:
        """
        Queue a credit to the recipient, or to the fallback if ineligible.

        Each bucket and the wallet balance grow by ``amount``.

        Args:
            recipient_id: Intended recipient
            level: Upline level of the recipient (1-based)
            amount: Amount to credit
            buckets: Income bucket columns to increase
            history_type: HistoryType tag for an eligible credit
            remarks: History remarks
            eligible: Whether the recipient qualifies
            reason: Why an ineligible credit is redirected

        Returns:
            True if the recipient itself is credited
        """
        if eligible:
            target_id = recipient_id
            entry_type = history_type
            entry_remarks = remarks
        else:
            target_id = self.fallback_participant_id
            entry_type = HistoryType.redirected(history_type)
            entry_remarks = (
                f"{remarks} (redirected from participant {recipient_id} "
                f"at level {level}: {reason})"
            )

        self.credits.append(
            QueuedCredit(
                recipient_id=target_id,
                origin_id=recipient_id,
                level=level,
                amount=amount,
                history_type=entry_type,
                redirected=not eligible,
            )
        )

        if amount <= 0:
            return eligible

        for bucket in buckets:
            self._deltas[target_id][bucket] += amount
        self._deltas[target_id]["wallet_balance"] += amount

        self._history.append(
            {
                "participant_id": target_id,
                "type": entry_type,
                "amount": amount,
                "remarks": entry_remarks,
                "status": HistoryStatus.COMPLETED,
                "created_at": self.now,
            }
        )
        return eligible

    def add(self, participant_id: int, column: str, value: Decimal | int) -> None:
        """Queue a non-wallet counter increment (no history entry)."""
        current = self._deltas[participant_id].get(column, 0)
        self._deltas[participant_id][column] = current + value

    async def apply(self) -> None:
        """Write all queued increments and history entries."""
        if self._deltas:
            deltas = {pid: dict(cols) for pid, cols in self._deltas.items()}
            updated = await self.participant_repo.increment_many(deltas)
            if updated != len(deltas):
                raise NotFoundError(
                    f"Credit batch queued {len(deltas)} participants "
                    f"but updated {updated}"
                )

        if self._history:
            await self.history_service.record_many(self._history)

        logger.debug(
            "Credit batch applied",
            extra={
                "credited": self.credited_count,
                "redirected": self.redirected_count,
                "history_entries": len(self._history),
            },
        )

        self._deltas.clear()
        self._history = []
