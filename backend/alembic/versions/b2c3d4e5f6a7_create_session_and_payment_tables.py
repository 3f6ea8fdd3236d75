"""create_session_and_payment_tables

Revision ID: b2c3d4e5f6a7
Revises: a1b2c3d4e5f6
Create Date: 2026-09-28

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "b2c3d4e5f6a7"
down_revision: Union[str, Sequence[str], None] = "a1b2c3d4e5f6"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create charging_session and payment tables with their partial unique indexes."""
    op.create_table(
        "charging_session",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("account_id", sa.String(length=36), nullable=True),
        sa.Column("charger_id", sa.String(length=36), nullable=False),
        sa.Column("vehicle_plate", sa.String(length=32), nullable=True),
        sa.Column("start_time", sa.DateTime(), nullable=False),
        sa.Column("end_time", sa.DateTime(), nullable=True),
        sa.Column("start_soc", sa.Integer(), nullable=True),
        sa.Column("end_soc", sa.Integer(), nullable=True),
        sa.Column("energy_kwh", sa.Numeric(12, 3), nullable=True),
        sa.Column("total_cost", sa.Numeric(14, 2), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="ACTIVE"),
        sa.Column("token", sa.String(length=64), nullable=False),
        sa.Column("cancel_reason", sa.String(length=1024), nullable=True),
        sa.Column("payment_id", sa.String(length=36), nullable=True),
        sa.ForeignKeyConstraint(["account_id"], ["account.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["charger_id"], ["charger.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("token"),
    )
    op.create_index(
        "uq_charging_session_active_charger",
        "charging_session",
        ["charger_id"],
        unique=True,
        sqlite_where=sa.text("status = 'ACTIVE'"),
        postgresql_where=sa.text("status = 'ACTIVE'"),
    )
    op.create_table(
        "payment",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("session_id", sa.String(length=36), nullable=False),
        sa.Column("account_id", sa.String(length=36), nullable=True),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("method", sa.String(length=16), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["session_id"], ["charging_session.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["account_id"], ["account.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "uq_payment_session_completed",
        "payment",
        ["session_id"],
        unique=True,
        sqlite_where=sa.text("status = 'COMPLETED'"),
        postgresql_where=sa.text("status = 'COMPLETED'"),
    )


def downgrade() -> None:
    """Drop payment and charging_session tables."""
    op.drop_index("uq_payment_session_completed", table_name="payment", if_exists=True)
    op.drop_table("payment", if_exists=True)
    op.drop_index("uq_charging_session_active_charger", table_name="charging_session", if_exists=True)
    op.drop_table("charging_session", if_exists=True)
