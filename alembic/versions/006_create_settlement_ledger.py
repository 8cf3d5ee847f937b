"""006: create settlement_ledger table

Revision ID: 006
Revises: 005
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE settlement_ledger (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            phase_id        UUID            NOT NULL REFERENCES game_phases(id) ON DELETE CASCADE,
            winning_number  VARCHAR(3),
            total_in        NUMERIC(14, 2)  NOT NULL DEFAULT 0,
            total_out       NUMERIC(14, 2)  NOT NULL DEFAULT 0,
            profit          NUMERIC(14, 2)  NOT NULL DEFAULT 0,
            closed_at       TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_settlement_ledger_phase UNIQUE (phase_id),
            CONSTRAINT ck_settlement_ledger_winning CHECK (
                winning_number IS NULL OR winning_number ~ '^[0-9]{3}$'
            )
        );
    """)
    op.execute("CREATE INDEX idx_settlement_ledger_closed_at ON settlement_ledger (closed_at DESC);")
    op.execute("COMMENT ON TABLE settlement_ledger IS 'One row per settled phase; its presence freezes the phase';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS settlement_ledger CASCADE;")
