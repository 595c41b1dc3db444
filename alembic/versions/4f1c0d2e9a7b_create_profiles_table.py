"""Create profiles table

Revision ID: 4f1c0d2e9a7b
Revises:
Create Date: 2026-10-01 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "4f1c0d2e9a7b"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("namespace", sa.String(64), primary_key=True),
        sa.Column("user_id", sa.String(32), primary_key=True),
        sa.Column("username", sa.String(100), nullable=True),
        sa.Column("candy", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "title",
            sa.String(100),
            nullable=False,
            server_default="New Trick-or-Treater",
        ),
        sa.Column(
            "inventory",
            sa.JSON().with_variant(postgresql.JSONB(), "postgresql"),
            nullable=False,
            server_default="[]",
        ),
        sa.Column("last_used", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("revision", sa.Integer(), nullable=False, server_default="1"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("candy >= 0", name="ck_profiles_candy_non_negative"),
    )
    op.create_index("ix_profiles_namespace_candy", "profiles", ["namespace", "candy"])


def downgrade() -> None:
    op.drop_index("ix_profiles_namespace_candy", table_name="profiles")
    op.drop_table("profiles")
