"""007: seed default users

Revision ID: 007
Revises: 006
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Development logins: admin/admin123 and user/user123. Change in production.
    op.execute("""
        INSERT INTO users (username, password_hash, role)
        VALUES
            ('admin', crypt('admin123', gen_salt('bf', 10)), 'ADMIN'),
            ('user',  crypt('user123',  gen_salt('bf', 10)), 'COLLECTOR')
        ON CONFLICT (username) DO NOTHING;
    """)


def downgrade() -> None:
    op.execute("DELETE FROM users WHERE username IN ('admin', 'user');")
