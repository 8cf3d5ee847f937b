"""LedgerRepository: settlement_ledger rows, one per settled phase.

All queries use raw text() SQL (no ORM).
"""

from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.ova_engine.settlement import SettlementSummary
from src.ova_ledger.domain.models import LedgerSummary, SettlementLedgerEntry

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_ENTRY_COLUMNS = """
    CAST(l.id AS TEXT) AS id, CAST(l.phase_id AS TEXT) AS phase_id,
    p.name AS phase_name, l.winning_number,
    l.total_in, l.total_out, l.profit, l.closed_at
"""

_INSERT_ENTRY_SQL = text("""
    INSERT INTO settlement_ledger (phase_id, winning_number, total_in, total_out, profit)
    VALUES (CAST(:phase_id AS UUID), :winning_number, :total_in, :total_out, :profit)
    RETURNING CAST(id AS TEXT) AS id
""")

_LIST_ENTRIES_SQL = text(f"""
    SELECT {_ENTRY_COLUMNS}
    FROM settlement_ledger l
    JOIN game_phases p ON p.id = l.phase_id
    ORDER BY l.closed_at DESC
""")

_GET_BY_ID_SQL = text(f"""
    SELECT {_ENTRY_COLUMNS}
    FROM settlement_ledger l
    JOIN game_phases p ON p.id = l.phase_id
    WHERE l.id = CAST(:entry_id AS UUID)
""")

_GET_BY_PHASE_SQL = text(f"""
    SELECT {_ENTRY_COLUMNS}
    FROM settlement_ledger l
    JOIN game_phases p ON p.id = l.phase_id
    WHERE l.phase_id = CAST(:phase_id AS UUID)
""")

_SUMMARY_SQL = text("""
    SELECT COALESCE(SUM(total_in), 0) AS total_in,
           COALESCE(SUM(total_out), 0) AS total_out,
           COALESCE(SUM(profit), 0) AS total_profit,
           COUNT(*) AS phases_count
    FROM settlement_ledger
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_entry(row: object) -> SettlementLedgerEntry:
    return SettlementLedgerEntry(
        id=row.id,  # type: ignore[attr-defined]
        phase_id=row.phase_id,  # type: ignore[attr-defined]
        phase_name=row.phase_name,  # type: ignore[attr-defined]
        winning_number=row.winning_number,  # type: ignore[attr-defined]
        total_in=row.total_in,  # type: ignore[attr-defined]
        total_out=row.total_out,  # type: ignore[attr-defined]
        profit=row.profit,  # type: ignore[attr-defined]
        closed_at=row.closed_at,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class LedgerRepository:
    async def insert_entry(
        self, db: AsyncSession, phase_id: str, summary: SettlementSummary
    ) -> SettlementLedgerEntry:
        result = await db.execute(
            _INSERT_ENTRY_SQL,
            {
                "phase_id": phase_id,
                "winning_number": summary.winning_number,
                "total_in": Decimal(summary.total_in),
                "total_out": Decimal(summary.total_out),
                "profit": Decimal(summary.profit),
            },
        )
        entry_id = result.scalar_one()
        row = (await db.execute(_GET_BY_ID_SQL, {"entry_id": entry_id})).fetchone()
        return _row_to_entry(row)

    async def list_entries(self, db: AsyncSession) -> list[SettlementLedgerEntry]:
        result = await db.execute(_LIST_ENTRIES_SQL)
        return [_row_to_entry(row) for row in result.fetchall()]

    async def get_by_phase(
        self, db: AsyncSession, phase_id: str
    ) -> SettlementLedgerEntry | None:
        result = await db.execute(_GET_BY_PHASE_SQL, {"phase_id": phase_id})
        row = result.fetchone()
        return _row_to_entry(row) if row else None

    async def get_summary(self, db: AsyncSession) -> LedgerSummary:
        row = (await db.execute(_SUMMARY_SQL)).fetchone()
        return LedgerSummary(
            total_in=row.total_in,  # type: ignore[union-attr]
            total_out=row.total_out,  # type: ignore[union-attr]
            total_profit=row.total_profit,  # type: ignore[union-attr]
            phases_count=row.phases_count,  # type: ignore[union-attr]
        )
