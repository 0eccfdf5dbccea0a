"""
History service.

Append-only ledger writer. Every wallet credit made by the engine has a
matching entry here, so the ledger can be reconciled against balances.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from payout_engine.models.history_entry import HistoryEntry, HistoryStatus
from payout_engine.repositories.history_repository import HistoryRepository
from payout_engine.repositories.participant_repository import (
    ParticipantRepository,
)
from payout_engine.utils.exceptions import NotFoundError


@dataclass
class ReconciliationResult:
    """Wallet balance compared with the ledger total."""

    participant_id: int
    wallet_balance: Decimal
    ledger_total: Decimal

    @property
    def difference(self) -> Decimal:
        return self.wallet_balance - self.ledger_total

    @property
    def is_consistent(self) -> bool:
        return self.difference == 0


class HistoryService:
    """History ledger writer and reader."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize history service.

        Args:
            session: Async database session
        """
        self.session = session
        self.history_repo = HistoryRepository(session)
        self.participant_repo = ParticipantRepository(session)

    async def record(
        self,
        participant_id: int,
        history_type: str,
        amount: Decimal,
        remarks: str | None = None,
        created_at: datetime | None = None,
        status: str = HistoryStatus.COMPLETED,
    ) -> HistoryEntry:
        """
        Append one entry.

        Args:
            participant_id: Credited participant
            history_type: HistoryType tag
            amount: Credited amount
            remarks: Free-text explanation
            created_at: Event time (defaults to now)
            status: Entry status

        Returns:
            Created entry
        """
        data: dict[str, Any] = {
            "participant_id": participant_id,
            "type": history_type,
            "amount": amount,
            "remarks": remarks,
            "status": status,
        }
        if created_at is not None:
            data["created_at"] = created_at

        entry = await self.history_repo.create(**data)

        logger.debug(
            "History entry recorded",
            extra={
                "participant_id": participant_id,
                "type": history_type,
                "amount": str(amount),
            },
        )
        return entry

    async def record_many(
        self, entries: list[dict[str, Any]]
    ) -> list[HistoryEntry]:
        """
        Append several entries with one INSERT.

        Args:
            entries: Entry data dicts (participant_id, type, amount,
                remarks, status, created_at)

        Returns:
            Created entries
        """
        return await self.history_repo.bulk_create(entries)

    async def get_for_participant(
        self,
        participant_id: int,
        history_type: str | None = None,
        page: int = 1,
        per_page: int = 50,
    ) -> tuple[list[HistoryEntry], int]:
        """
        Get a participant's entries, newest first.

        Args:
            participant_id: Participant ID
            history_type: Optional type filter
            page: Page number (1-indexed)
            per_page: Items per page

        Returns:
            Tuple of (entries, total_count)
        """
        filters: dict[str, Any] = {"participant_id": participant_id}
        if history_type:
            filters["type"] = history_type

        return await self.history_repo.find_paginated(
            page=page, per_page=per_page, **filters
        )

    async def reconcile_wallet(self, participant_id: int) -> ReconciliationResult:
        """
        Compare a wallet balance with the sum of its completed entries.

        Args:
            participant_id: Participant ID

        Returns:
            ReconciliationResult

        Raises:
            NotFoundError: Participant does not exist
        """
        participant = await self.participant_repo.get_fresh(participant_id)
        if participant is None:
            raise NotFoundError(f"Participant {participant_id} not found")

        ledger_total = await self.history_repo.sum_completed(participant_id)
        result = ReconciliationResult(
            participant_id=participant_id,
            wallet_balance=participant.wallet_balance,
            ledger_total=ledger_total,
        )

        if not result.is_consistent:
            logger.warning(
                "Wallet balance does not match history ledger",
                extra={
                    "participant_id": participant_id,
                    "wallet_balance": str(result.wallet_balance),
                    "ledger_total": str(ledger_total),
                },
            )
        return result
