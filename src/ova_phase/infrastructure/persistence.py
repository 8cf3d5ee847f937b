"""PhaseRepository: concrete implementation of PhaseRepositoryProtocol.

All queries use raw text() SQL (no ORM).
`settled` is derived from the settlement_ledger row, never stored on the phase.
"""

from decimal import Decimal

from sqlalchemy import TextClause, text
from sqlalchemy.ext.asyncio import AsyncSession

from src.ova_engine.counters import VOLUME_FLOOR, PhaseCounters
from src.ova_phase.domain.models import Phase

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_PHASE_COLUMNS = """
    CAST(p.id AS TEXT) AS id, p.name, p.active, p.start_date, p.end_date,
    p.total_bets, p.total_volume, p.global_limit,
    EXISTS (SELECT 1 FROM settlement_ledger l WHERE l.phase_id = p.id) AS settled,
    p.created_at, p.updated_at
"""

_LIST_PHASES_SQL = text(f"""
    SELECT {_PHASE_COLUMNS}
    FROM game_phases p
    ORDER BY p.start_date DESC
""")

_GET_PHASE_SQL = text(f"""
    SELECT {_PHASE_COLUMNS}
    FROM game_phases p
    WHERE p.id = CAST(:phase_id AS UUID)
""")

# Serialises every bet mutation on the phase row.
_GET_PHASE_FOR_UPDATE_SQL = text(f"""
    SELECT {_PHASE_COLUMNS}
    FROM game_phases p
    WHERE p.id = CAST(:phase_id AS UUID)
    FOR UPDATE OF p
""")

_GET_ACTIVE_PHASE_SQL = text(f"""
    SELECT {_PHASE_COLUMNS}
    FROM game_phases p
    WHERE p.active = TRUE
    ORDER BY p.start_date DESC
    LIMIT 1
""")

_NAME_EXISTS_SQL = text("""
    SELECT 1 FROM game_phases WHERE name = :name
""")

_DEACTIVATE_ALL_SQL = text("""
    UPDATE game_phases
    SET active = FALSE, updated_at = NOW()
    WHERE active = TRUE
""")

_INSERT_PHASE_SQL = text("""
    INSERT INTO game_phases (name, active, global_limit)
    VALUES (:name, TRUE, :global_limit)
    RETURNING CAST(id AS TEXT) AS id
""")

_ACTIVATE_SQL = text("""
    UPDATE game_phases
    SET active = TRUE, end_date = NULL, updated_at = NOW()
    WHERE id = CAST(:phase_id AS UUID)
    RETURNING CAST(id AS TEXT) AS id
""")

_CLOSE_SQL = text("""
    UPDATE game_phases
    SET active = FALSE, end_date = NOW(), updated_at = NOW()
    WHERE id = CAST(:phase_id AS UUID)
    RETURNING CAST(id AS TEXT) AS id
""")

_DELETE_SQL = text("""
    DELETE FROM game_phases WHERE id = CAST(:phase_id AS UUID)
""")

_UPDATE_GLOBAL_LIMIT_SQL = text("""
    UPDATE game_phases
    SET global_limit = :global_limit, updated_at = NOW()
    WHERE id = CAST(:phase_id AS UUID)
    RETURNING CAST(id AS TEXT) AS id
""")

# Cached counters are rewritten from the bet rows; volume clamped at the floor.
_REFRESH_COUNTERS_SQL = text("""
    UPDATE game_phases p
    SET total_bets = agg.bet_count,
        total_volume = GREATEST(agg.volume, :volume_floor),
        updated_at = NOW()
    FROM (
        SELECT COUNT(*) AS bet_count, COALESCE(SUM(amount), 0) AS volume
        FROM bets
        WHERE phase_id = CAST(:phase_id AS UUID)
    ) AS agg
    WHERE p.id = CAST(:phase_id AS UUID)
    RETURNING p.total_bets, p.total_volume
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_phase(row: object) -> Phase:
    return Phase(
        id=row.id,  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        active=row.active,  # type: ignore[attr-defined]
        start_date=row.start_date,  # type: ignore[attr-defined]
        end_date=row.end_date,  # type: ignore[attr-defined]
        total_bets=row.total_bets,  # type: ignore[attr-defined]
        total_volume=row.total_volume,  # type: ignore[attr-defined]
        global_limit=row.global_limit,  # type: ignore[attr-defined]
        settled=row.settled,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class PhaseRepository:
    """Concrete repository. Never commits; the caller owns the transaction."""

    async def list_phases(self, db: AsyncSession) -> list[Phase]:
        result = await db.execute(_LIST_PHASES_SQL)
        return [_row_to_phase(row) for row in result.fetchall()]

    async def get_phase(
        self, db: AsyncSession, phase_id: str, for_update: bool = False
    ) -> Phase | None:
        sql = _GET_PHASE_FOR_UPDATE_SQL if for_update else _GET_PHASE_SQL
        result = await db.execute(sql, {"phase_id": phase_id})
        row = result.fetchone()
        return _row_to_phase(row) if row else None

    async def get_active_phase(self, db: AsyncSession) -> Phase | None:
        result = await db.execute(_GET_ACTIVE_PHASE_SQL)
        row = result.fetchone()
        return _row_to_phase(row) if row else None

    async def name_exists(self, db: AsyncSession, name: str) -> bool:
        result = await db.execute(_NAME_EXISTS_SQL, {"name": name})
        return result.fetchone() is not None

    async def deactivate_all(self, db: AsyncSession) -> int:
        result = await db.execute(_DEACTIVATE_ALL_SQL)
        return result.rowcount  # type: ignore[attr-defined]

    async def insert_phase(
        self, db: AsyncSession, name: str, global_limit: Decimal
    ) -> Phase:
        result = await db.execute(
            _INSERT_PHASE_SQL, {"name": name, "global_limit": global_limit}
        )
        phase_id = result.scalar_one()
        phase = await self.get_phase(db, phase_id)
        assert phase is not None
        return phase

    async def activate(self, db: AsyncSession, phase_id: str) -> Phase | None:
        return await self._update_and_reload(db, _ACTIVATE_SQL, {"phase_id": phase_id})

    async def close(self, db: AsyncSession, phase_id: str) -> Phase | None:
        return await self._update_and_reload(db, _CLOSE_SQL, {"phase_id": phase_id})

    async def delete(self, db: AsyncSession, phase_id: str) -> bool:
        result = await db.execute(_DELETE_SQL, {"phase_id": phase_id})
        return result.rowcount > 0  # type: ignore[attr-defined]

    async def update_global_limit(
        self, db: AsyncSession, phase_id: str, global_limit: Decimal
    ) -> Phase | None:
        return await self._update_and_reload(
            db,
            _UPDATE_GLOBAL_LIMIT_SQL,
            {"phase_id": phase_id, "global_limit": global_limit},
        )

    async def refresh_counters(self, db: AsyncSession, phase_id: str) -> PhaseCounters:
        result = await db.execute(
            _REFRESH_COUNTERS_SQL,
            {"phase_id": phase_id, "volume_floor": VOLUME_FLOOR},
        )
        row = result.fetchone()
        if row is None:
            return PhaseCounters(total_bets=0, total_volume=Decimal(0))
        return PhaseCounters(total_bets=row.total_bets, total_volume=row.total_volume)

    async def _update_and_reload(
        self, db: AsyncSession, sql: TextClause, params: dict
    ) -> Phase | None:
        result = await db.execute(sql, params)
        if result.fetchone() is None:
            return None
        return await self.get_phase(db, params["phase_id"])
