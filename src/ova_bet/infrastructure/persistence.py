"""BetRepository: concrete implementation of BetRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.
Bulk inserts go through unnest() so a whole submission is one round trip.
"""

from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.ova_bet.domain.models import Bet, NumberTotal
from src.ova_engine.models import Stake

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_BET_COLUMNS = """
    CAST(b.id AS TEXT) AS id, CAST(b.phase_id AS TEXT) AS phase_id,
    CAST(b.user_id AS TEXT) AS user_id, b.user_role, b.number, b.amount,
    b.timestamp, u.username
"""

_LIST_BETS_SQL = text(f"""
    SELECT {_BET_COLUMNS}
    FROM bets b
    LEFT JOIN users u ON u.id = b.user_id
    WHERE b.phase_id = CAST(:phase_id AS UUID)
      AND (CAST(:user_id AS UUID) IS NULL OR b.user_id = CAST(:user_id AS UUID))
    ORDER BY b.timestamp DESC, b.id DESC
""")

_AGGREGATE_SQL = text("""
    SELECT number, SUM(amount) AS total
    FROM bets
    WHERE phase_id = CAST(:phase_id AS UUID)
    GROUP BY number
    ORDER BY total DESC, number
""")

_INSERT_BETS_SQL = text(f"""
    WITH b AS (
        INSERT INTO bets (phase_id, user_id, user_role, number, amount)
        SELECT CAST(:phase_id AS UUID), CAST(:user_id AS UUID), :user_role,
               t.number, t.amount
        FROM unnest(CAST(:numbers AS TEXT[]), CAST(:amounts AS NUMERIC[]))
             AS t(number, amount)
        RETURNING *
    )
    SELECT {_BET_COLUMNS}
    FROM b
    LEFT JOIN users u ON u.id = b.user_id
""")

_GET_BET_SQL = text(f"""
    SELECT {_BET_COLUMNS}
    FROM bets b
    LEFT JOIN users u ON u.id = b.user_id
    WHERE b.id = CAST(:bet_id AS UUID)
""")

_USER_HISTORY_SQL = text(f"""
    SELECT {_BET_COLUMNS}, p.name AS phase_name
    FROM bets b
    JOIN game_phases p ON p.id = b.phase_id
    LEFT JOIN users u ON u.id = b.user_id
    WHERE b.user_id = CAST(:user_id AS UUID)
    ORDER BY b.timestamp DESC, b.id DESC
    LIMIT :limit
""")

_USER_PHASE_IDS_SQL = text("""
    SELECT DISTINCT CAST(phase_id AS TEXT) AS phase_id
    FROM bets
    WHERE user_id = CAST(:user_id AS UUID)
    ORDER BY phase_id
""")

_DELETE_BET_SQL = text("""
    DELETE FROM bets WHERE id = CAST(:bet_id AS UUID)
""")

_UPDATE_AMOUNT_SQL = text("""
    UPDATE bets SET amount = :amount
    WHERE id = CAST(:bet_id AS UUID)
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_bet(row: object) -> Bet:
    return Bet(
        id=row.id,  # type: ignore[attr-defined]
        phase_id=row.phase_id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        user_role=row.user_role,  # type: ignore[attr-defined]
        number=row.number,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        timestamp=row.timestamp,  # type: ignore[attr-defined]
        username=row.username,  # type: ignore[attr-defined]
    )


def _row_to_history_bet(row: object) -> Bet:
    bet = _row_to_bet(row)
    bet.phase_name = row.phase_name  # type: ignore[attr-defined]
    return bet


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class BetRepository:
    """Concrete repository. Never commits; the caller owns the transaction."""

    async def list_bets(
        self, db: AsyncSession, phase_id: str, user_id: str | None = None
    ) -> list[Bet]:
        result = await db.execute(
            _LIST_BETS_SQL, {"phase_id": phase_id, "user_id": user_id}
        )
        return [_row_to_bet(row) for row in result.fetchall()]

    async def aggregate_by_number(self, db: AsyncSession, phase_id: str) -> list[NumberTotal]:
        result = await db.execute(_AGGREGATE_SQL, {"phase_id": phase_id})
        return [NumberTotal(number=row.number, total=row.total) for row in result.fetchall()]

    async def insert_bets(
        self,
        db: AsyncSession,
        phase_id: str,
        user_id: str,
        user_role: str,
        stakes: list[Stake],
    ) -> list[Bet]:
        if not stakes:
            return []
        result = await db.execute(
            _INSERT_BETS_SQL,
            {
                "phase_id": phase_id,
                "user_id": user_id,
                "user_role": user_role,
                "numbers": [s.number for s in stakes],
                "amounts": [Decimal(s.amount) for s in stakes],
            },
        )
        return [_row_to_bet(row) for row in result.fetchall()]

    async def list_user_history(
        self, db: AsyncSession, user_id: str, limit: int = 100
    ) -> list[Bet]:
        """Latest bets of one user across every phase, newest first."""
        result = await db.execute(_USER_HISTORY_SQL, {"user_id": user_id, "limit": limit})
        return [_row_to_history_bet(row) for row in result.fetchall()]

    async def list_user_phase_ids(self, db: AsyncSession, user_id: str) -> list[str]:
        result = await db.execute(_USER_PHASE_IDS_SQL, {"user_id": user_id})
        return [row.phase_id for row in result.fetchall()]

    async def get_bet(self, db: AsyncSession, bet_id: str) -> Bet | None:
        result = await db.execute(_GET_BET_SQL, {"bet_id": bet_id})
        row = result.fetchone()
        return _row_to_bet(row) if row else None

    async def delete_bet(self, db: AsyncSession, bet_id: str) -> bool:
        result = await db.execute(_DELETE_BET_SQL, {"bet_id": bet_id})
        return result.rowcount > 0  # type: ignore[attr-defined]

    async def update_amount(
        self, db: AsyncSession, bet_id: str, amount: Decimal
    ) -> Bet | None:
        result = await db.execute(_UPDATE_AMOUNT_SQL, {"bet_id": bet_id, "amount": amount})
        if result.rowcount == 0:  # type: ignore[attr-defined]
            return None
        return await self.get_bet(db, bet_id)
