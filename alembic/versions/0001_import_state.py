"""import state table

Revision ID: 0001_import_state
Revises:
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa

revision = "0001_import_state"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "import_state",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("import_name", sa.String(length=100), nullable=False),
        sa.Column("key", sa.String(length=100), nullable=False),
        sa.Column("value", sa.BigInteger(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("idx_import_state_key", "import_state", ["import_name", "key"], unique=True)


def downgrade():
    op.drop_index("idx_import_state_key", table_name="import_state")
    op.drop_table("import_state")
