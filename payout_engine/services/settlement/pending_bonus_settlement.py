"""
Pending investment bonus release.

Each investment approval leaves six monthly entries per eligible ancestor,
grouped by ``investment_id``. A run releases at most one entry per group:
the lowest unawarded month, once as many calendar months have elapsed since
the group's ``created_at`` (start of the approval month), and at most once
per period: ``last_release_period`` on the remaining rows makes a repeated
run within a month a no-op. Groups behind schedule catch up one month per
period, never out of order.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from payout_engine.config.business_constants import INVESTMENT_BONUS_MONTHS
from payout_engine.models.history_entry import HistoryType
from payout_engine.repositories.participant_repository import (
    ParticipantRepository,
)
from payout_engine.repositories.pending_bonus_repository import (
    PendingBonusRepository,
)
from payout_engine.services.history_service import HistoryService
from payout_engine.services.settlement.result import SettlementResult
from payout_engine.utils.datetime_utils import (
    Clock,
    ensure_utc,
    months_between,
    period_key,
)


@dataclass(frozen=True)
class _Entry:
    """Detached copy of a pending entry (survives session rollback)."""

    id: int
    investor_id: int
    investment_id: int | None
    amount: Decimal
    month: int
    created_at: datetime
    last_release_period: str | None = None


GroupKey = int | tuple[int, date]


def next_due_entry(entries: list[_Entry], now: datetime) -> _Entry | None:
    """
    Pick the entry of a group that is due for release.

    Args:
        entries: Unawarded entries of one group
        now: Settlement time

    Returns:
        Lowest-month entry if its month has elapsed and the group has not
        released in this period, else None
    """
    if not entries:
        return None

    period = period_key(now)
    if any(e.last_release_period == period for e in entries):
        return None

    candidate = min(entries, key=lambda e: (e.month, e.id))
    anchor = min(e.created_at for e in entries)
    elapsed = months_between(anchor, now)

    if candidate.month > INVESTMENT_BONUS_MONTHS or candidate.month > elapsed:
        return None
    return candidate


class PendingBonusSettlement:
    """Releases due monthly investment bonuses."""

    def __init__(self, session: AsyncSession, clock: Clock) -> None:
        """
        Initialize settlement.

        Args:
            session: Async database session (committed per group)
            clock: Source of the settlement time
        """
        self.session = session
        self.clock = clock
        self.pending_repo = PendingBonusRepository(session)
        self.participant_repo = ParticipantRepository(session)
        self.history_service = HistoryService(session)

    async def settle(self) -> SettlementResult:
        """
        Release one due entry per group for every owner.

        Each group is its own transaction; a failing group is rolled back,
        logged and skipped. Awarded entries are purged per owner.

        Returns:
            SettlementResult with released and failed group counts
        """
        now = self.clock.now()
        result = SettlementResult()

        owner_ids = await self.pending_repo.get_owner_ids_with_unawarded()
        logger.info(f"Pending bonus settlement: {len(owner_ids)} owners to check")

        for owner_id in owner_ids:
            groups = await self._load_groups(owner_id)

            for group_key, entries in groups.items():
                try:
                    released = await self._release_group(owner_id, entries, now)
                    await self.session.commit()
                except Exception as e:
                    await self.session.rollback()
                    result.failed_count += 1
                    logger.exception(
                        f"Failed to release pending bonus group {group_key} "
                        f"of participant {owner_id}: {e}"
                    )
                    continue

                if released:
                    result.processed_count += 1
                else:
                    result.skipped_count += 1

            try:
                purged = await self.pending_repo.purge_awarded(owner_id)
                await self.session.commit()
            except Exception as e:
                await self.session.rollback()
                logger.exception(
                    f"Failed to purge awarded bonuses of participant {owner_id}: {e}"
                )
                continue

            if purged:
                logger.debug(
                    "Awarded pending bonuses purged",
                    extra={"owner_id": owner_id, "purged": purged},
                )

        logger.info(
            "Pending bonus settlement complete",
            extra={
                "released": result.processed_count,
                "failed": result.failed_count,
                "not_due": result.skipped_count,
            },
        )
        return result

    async def _load_groups(self, owner_id: int) -> dict[GroupKey, list[_Entry]]:
        """Load an owner's unawarded entries grouped by release group."""
        rows = await self.pending_repo.get_unawarded_for_owner(owner_id)

        groups: dict[GroupKey, list[_Entry]] = defaultdict(list)
        for row in rows:
            entry = _Entry(
                id=row.id,
                investor_id=row.investor_id,
                investment_id=row.investment_id,
                amount=row.amount,
                month=row.month,
                created_at=ensure_utc(row.created_at),
                last_release_period=row.last_release_period,
            )
            if entry.investment_id is not None:
                key: GroupKey = entry.investment_id
            else:
                # Legacy rows without an investment reference
                key = (entry.investor_id, entry.created_at.date())
            groups[key].append(entry)
        return groups

    async def _release_group(
        self, owner_id: int, entries: list[_Entry], now: datetime
    ) -> bool:
        """Release the due entry of one group; returns True if released."""
        entry = next_due_entry(entries, now)
        if entry is None:
            return False

        if not await self.pending_repo.mark_awarded(entry.id, now):
            # Released by a concurrent run
            return False

        await self.pending_repo.mark_group_released(
            [e.id for e in entries if e.id != entry.id], period_key(now)
        )

        await self.participant_repo.increment_many(
            {
                owner_id: {
                    "investment_referral_return_income": entry.amount,
                    "wallet_balance": entry.amount,
                }
            }
        )
        await self.history_service.record(
            owner_id,
            HistoryType.MONTHLY_INVESTMENT_BONUS,
            entry.amount,
            remarks=(
                f"Month {entry.month} of {INVESTMENT_BONUS_MONTHS} investment "
                f"bonus from participant {entry.investor_id}"
                + (
                    f" (investment {entry.investment_id})"
                    if entry.investment_id is not None
                    else ""
                )
            ),
            created_at=now,
        )

        logger.info(
            "Pending bonus released",
            extra={
                "owner_id": owner_id,
                "bonus_id": entry.id,
                "investment_id": entry.investment_id,
                "month": entry.month,
                "amount": str(entry.amount),
            },
        )
        return True
