"""003: create game_phases table

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE game_phases (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            name            VARCHAR(100)    NOT NULL,
            active          BOOLEAN         NOT NULL DEFAULT TRUE,
            start_date      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            end_date        TIMESTAMPTZ,
            total_bets      INTEGER         NOT NULL DEFAULT 0,
            total_volume    NUMERIC(14, 2)  NOT NULL DEFAULT 0,
            global_limit    NUMERIC(14, 2)  NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_game_phases_name          UNIQUE (name),
            CONSTRAINT ck_game_phases_total_bets    CHECK (total_bets >= 0),
            CONSTRAINT ck_game_phases_volume_floor  CHECK (total_volume >= -10000000),
            CONSTRAINT ck_game_phases_global_limit  CHECK (global_limit >= 0)
        );
    """)
    # At most one active phase system-wide
    op.execute("""
        CREATE UNIQUE INDEX uq_game_phases_single_active
            ON game_phases (active) WHERE active = TRUE;
    """)
    op.execute("CREATE INDEX idx_game_phases_start_date ON game_phases (start_date DESC);")
    op.execute("""
        CREATE TRIGGER trg_game_phases_updated_at
            BEFORE UPDATE ON game_phases
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute(
        "COMMENT ON COLUMN game_phases.total_volume IS "
        "'Cache of SUM(bets.amount), rewritten in every bet transaction';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS game_phases CASCADE;")
