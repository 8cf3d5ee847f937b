"""005: create number_limits table

Revision ID: 005
Revises: 004
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE number_limits (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            phase_id        UUID            NOT NULL REFERENCES game_phases(id) ON DELETE CASCADE,
            number          VARCHAR(3)      NOT NULL,
            max_amount      NUMERIC(14, 2)  NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_number_limits_phase_number UNIQUE (phase_id, number),
            CONSTRAINT ck_number_limits_number CHECK (number ~ '^[0-9]{3}$'),
            CONSTRAINT ck_number_limits_max_amount CHECK (max_amount >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_number_limits_updated_at
            BEFORE UPDATE ON number_limits
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS number_limits CASCADE;")
