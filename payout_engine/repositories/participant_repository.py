"""
Participant repository.

Data access layer for Participant model: tree traversal, leg counts and
SQL-side income increments.
"""

from decimal import Decimal

from sqlalchemy import case, func, select, text, update
from sqlalchemy.ext.asyncio import AsyncSession

from payout_engine.models.participant import (
    INCOME_BUCKETS,
    LegPosition,
    Participant,
)
from payout_engine.repositories.base import BaseRepository

# Columns that may be incremented through increment_many
INCREMENTABLE_COLUMNS = frozenset(
    INCOME_BUCKETS
    + (
        "wallet_balance",
        "referral_investment_principal",
        "total_investment",
        "direct_referral_count",
        "total_pairs",
    )
)


class ParticipantRepository(BaseRepository[Participant]):
    """Participant repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize participant repository."""
        super().__init__(Participant, session)

    async def get_upline_ids(
        self, participant_id: int, depth: int
    ) -> list[int]:
        """
        Get ancestor IDs with one recursive CTE.

        Args:
            participant_id: Participant whose upline is resolved
            depth: Maximum number of ancestors

        Returns:
            Ancestor IDs, nearest (sponsor) first
        """
        query = text("""
            WITH RECURSIVE upline AS (
                -- Base case: the participant itself
                SELECT p.id, p.referred_by, 0 AS level
                FROM participants p
                WHERE p.id = :participant_id

                UNION ALL

                -- Recursive case: sponsor of the previous level
                SELECT p.id, p.referred_by, u.level + 1 AS level
                FROM participants p
                INNER JOIN upline u ON p.id = u.referred_by
                WHERE u.level < :depth
            )
            SELECT id, level
            FROM upline
            WHERE level > 0
            ORDER BY level ASC
        """)

        result = await self.session.execute(
            query, {"participant_id": participant_id, "depth": depth}
        )
        return [row.id for row in result.all()]

    async def get_direct_referrals(self, participant_id: int) -> list[Participant]:
        """Get participants sponsored directly by a participant."""
        stmt = (
            select(Participant)
            .where(Participant.referred_by == participant_id)
            .order_by(Participant.placed_at, Participant.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_downline_ids(
        self, participant_id: int, depth: int, min_level: int = 1
    ) -> list[int]:
        """
        Get descendant IDs with one recursive CTE.

        Args:
            participant_id: Root of the downline
            depth: Deepest level included
            min_level: Shallowest level included (2 skips direct referrals)

        Returns:
            Descendant IDs ordered by level, then ID
        """
        query = text("""
            WITH RECURSIVE downline AS (
                -- Base case: direct referrals
                SELECT p.id, 1 AS level
                FROM participants p
                WHERE p.referred_by = :participant_id

                UNION ALL

                -- Recursive case: referrals of the previous level
                SELECT p.id, d.level + 1 AS level
                FROM participants p
                INNER JOIN downline d ON p.referred_by = d.id
                WHERE d.level < :depth
            )
            SELECT id, level
            FROM downline
            WHERE level >= :min_level
            ORDER BY level ASC, id ASC
        """)

        result = await self.session.execute(
            query,
            {
                "participant_id": participant_id,
                "depth": depth,
                "min_level": min_level,
            },
        )
        return [row.id for row in result.all()]

    async def get_many_for_update(
        self, ids: list[int]
    ) -> dict[int, Participant]:
        """
        Load and row-lock participants in one query.

        Args:
            ids: Participant IDs

        Returns:
            Mapping of ID to participant (missing IDs are absent)
        """
        if not ids:
            return {}

        stmt = (
            select(Participant)
            .where(Participant.id.in_(ids))
            .order_by(Participant.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return {p.id: p for p in result.scalars().all()}

    async def count_direct_children(
        self, ids: list[int]
    ) -> dict[int, int]:
        """
        Count direct children of each participant.

        Args:
            ids: Sponsor IDs

        Returns:
            Mapping of sponsor ID to child count (0 for childless IDs)
        """
        counts = {id_: 0 for id_ in ids}
        if not ids:
            return counts

        stmt = (
            select(Participant.referred_by, func.count(Participant.id))
            .where(Participant.referred_by.in_(ids))
            .group_by(Participant.referred_by)
        )
        result = await self.session.execute(stmt)
        for sponsor_id, child_count in result.all():
            counts[sponsor_id] = child_count
        return counts

    async def count_legs(self, sponsor_id: int) -> tuple[int, int]:
        """
        Count children on each leg.

        Args:
            sponsor_id: Parent participant ID

        Returns:
            Tuple of (left_count, right_count)
        """
        stmt = (
            select(Participant.position, func.count(Participant.id))
            .where(Participant.referred_by == sponsor_id)
            .group_by(Participant.position)
        )
        result = await self.session.execute(stmt)
        counts = dict(result.all())
        return (
            counts.get(LegPosition.LEFT, 0),
            counts.get(LegPosition.RIGHT, 0),
        )

    async def increment_many(
        self, deltas: dict[int, dict[str, Decimal | int]]
    ) -> int:
        """
        Apply per-participant column increments in one UPDATE.

        Every touched column becomes ``col + CASE id WHEN .. THEN .. ELSE 0``.

        Args:
            deltas: Mapping of participant ID to {column: increment}

        Returns:
            Number of rows updated
        """
        deltas = {pid: cols for pid, cols in deltas.items() if cols}
        if not deltas:
            return 0

        columns = sorted({col for cols in deltas.values() for col in cols})
        unknown = set(columns) - INCREMENTABLE_COLUMNS
        if unknown:
            raise ValueError(f"Columns cannot be incremented: {sorted(unknown)}")

        values = {}
        for column in columns:
            attr = getattr(Participant, column)
            per_row = {
                pid: cols[column]
                for pid, cols in deltas.items()
                if column in cols
            }
            zero = 0 if column in ("direct_referral_count", "total_pairs") else Decimal("0")
            values[column] = attr + case(per_row, value=Participant.id, else_=zero)

        stmt = (
            update(Participant)
            .where(Participant.id.in_(list(deltas)))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def set_pairs(self, participant_id: int, pairs: int) -> None:
        """
        Raise the consumed pair counter.

        The WHERE clause keeps the counter monotonic.
        """
        stmt = (
            update(Participant)
            .where(Participant.id == participant_id, Participant.pairs < pairs)
            .values(pairs=pairs)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
