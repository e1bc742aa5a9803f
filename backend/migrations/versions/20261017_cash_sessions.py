"""Cash sessions and count detail rows

Revision ID: 20261017_cash_sessions
Revises:
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261017_cash_sessions"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "cash_sessions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("starting_cash", sa.Numeric(12, 2), nullable=False),
        sa.Column("ending_cash", sa.Numeric(12, 2), nullable=True),
        sa.Column("total_cash_sales", sa.Numeric(12, 2), nullable=True),
        sa.Column("total_card_sales", sa.Numeric(12, 2), nullable=True),
        sa.Column("total_expenses", sa.Numeric(12, 2), nullable=True),
        sa.Column("total_tips", sa.Numeric(12, 2), nullable=True),
        sa.Column("loans_withdrawals_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("loans_withdrawals_reason", sa.String(length=255), nullable=True),
        sa.Column("calculated_difference", sa.Numeric(12, 2), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("version_id", sa.Integer(), nullable=False),
        sa.CheckConstraint("status IN ('open', 'closed')", name="ck_cash_sessions_status"),
        sa.CheckConstraint(
            "(status = 'open' AND calculated_difference IS NULL)"
            " OR (status = 'closed' AND calculated_difference IS NOT NULL)",
            name="ck_cash_sessions_difference_when_closed",
        ),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_cash_sessions_user_id", "cash_sessions", ["user_id"])
    op.create_index("ix_cash_sessions_start_time", "cash_sessions", ["start_time"])
    op.create_index("ix_cash_sessions_status", "cash_sessions", ["status"])
    op.create_index(
        "uq_cash_sessions_single_open",
        "cash_sessions",
        ["status"],
        unique=True,
        sqlite_where=sa.text("status = 'open'"),
        postgresql_where=sa.text("status = 'open'"),
    )

    op.create_table(
        "cash_session_details",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("cash_session_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=8), nullable=False),
        sa.Column("denomination_value", sa.Numeric(12, 2), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("subtotal", sa.Numeric(12, 2), nullable=False),
        sa.CheckConstraint("type IN ('start', 'end')", name="ck_cash_session_details_type"),
        sa.CheckConstraint("quantity >= 0", name="ck_cash_session_details_quantity"),
        sa.ForeignKeyConstraint(["cash_session_id"], ["cash_sessions.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_cash_session_details_cash_session_id", "cash_session_details", ["cash_session_id"])
    op.create_index("ix_cash_session_details_session_type", "cash_session_details", ["cash_session_id", "type"])


def downgrade():
    op.drop_index("ix_cash_session_details_session_type", table_name="cash_session_details")
    op.drop_index("ix_cash_session_details_cash_session_id", table_name="cash_session_details")
    op.drop_table("cash_session_details")

    op.drop_index("uq_cash_sessions_single_open", table_name="cash_sessions")
    op.drop_index("ix_cash_sessions_status", table_name="cash_sessions")
    op.drop_index("ix_cash_sessions_start_time", table_name="cash_sessions")
    op.drop_index("ix_cash_sessions_user_id", table_name="cash_sessions")
    op.drop_table("cash_sessions")
