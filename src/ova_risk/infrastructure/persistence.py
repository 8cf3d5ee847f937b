"""LimitRepository: per-number limits, at most one row per (phase, number).

All queries use raw text() SQL (no ORM).
"""

from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

_LIST_LIMITS_SQL = text("""
    SELECT number, max_amount
    FROM number_limits
    WHERE phase_id = CAST(:phase_id AS UUID)
    ORDER BY number
""")

_UPSERT_LIMITS_SQL = text("""
    INSERT INTO number_limits (phase_id, number, max_amount)
    SELECT CAST(:phase_id AS UUID), t.number, t.max_amount
    FROM unnest(CAST(:numbers AS TEXT[]), CAST(:amounts AS NUMERIC[]))
         AS t(number, max_amount)
    ON CONFLICT (phase_id, number)
    DO UPDATE SET max_amount = EXCLUDED.max_amount, updated_at = NOW()
""")

_DELETE_LIMIT_SQL = text("""
    DELETE FROM number_limits
    WHERE phase_id = CAST(:phase_id AS UUID) AND number = :number
""")


class LimitRepository:
    async def list_limits(self, db: AsyncSession, phase_id: str) -> dict[str, Decimal]:
        result = await db.execute(_LIST_LIMITS_SQL, {"phase_id": phase_id})
        return {row.number: row.max_amount for row in result.fetchall()}

    async def upsert_limits(
        self, db: AsyncSession, phase_id: str, limits: list[tuple[str, Decimal]]
    ) -> int:
        """Insert or overwrite; numbers must be unique within one call."""
        if not limits:
            return 0
        result = await db.execute(
            _UPSERT_LIMITS_SQL,
            {
                "phase_id": phase_id,
                "numbers": [number for number, _ in limits],
                "amounts": [amount for _, amount in limits],
            },
        )
        return result.rowcount  # type: ignore[attr-defined]

    async def delete_limit(self, db: AsyncSession, phase_id: str, number: str) -> bool:
        result = await db.execute(_DELETE_LIMIT_SQL, {"phase_id": phase_id, "number": number})
        return result.rowcount > 0  # type: ignore[attr-defined]
