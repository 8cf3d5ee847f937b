"""004: create bets table

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE bets (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            phase_id        UUID            NOT NULL REFERENCES game_phases(id) ON DELETE CASCADE,
            user_id         UUID            NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            user_role       VARCHAR(20)     NOT NULL,
            number          VARCHAR(3)      NOT NULL,
            amount          NUMERIC(14, 2)  NOT NULL,
            timestamp       TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_bets_number CHECK (number ~ '^([0-9]{3}|ADJ|EXC)$')
        );
    """)
    op.execute("CREATE INDEX idx_bets_phase_id ON bets (phase_id);")
    op.execute("CREATE INDEX idx_bets_user_id ON bets (user_id);")
    op.execute("CREATE INDEX idx_bets_phase_number ON bets (phase_id, number);")
    op.execute("CREATE INDEX idx_bets_timestamp ON bets (timestamp DESC);")
    op.execute("COMMENT ON COLUMN bets.amount IS 'Signed; negative rows are reductions';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS bets CASCADE;")
