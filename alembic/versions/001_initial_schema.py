"""Initial schema — stocks, exchanges, exchange_members, stock_price_history.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "stocks",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("description", sa.String(1000), nullable=True),
        sa.Column("current_price", sa.Numeric(19, 4), nullable=False),
        sa.Column("last_update", sa.DateTime(timezone=True), nullable=False),
        sa.Column("version", sa.Integer, nullable=False),
    )

    op.create_table(
        "exchanges",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("description", sa.String(1000), nullable=True),
        sa.Column("live_in_market", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
    )

    op.create_table(
        "exchange_members",
        sa.Column(
            "exchange_id", sa.Integer,
            sa.ForeignKey("exchanges.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column(
            "stock_id", sa.Integer,
            sa.ForeignKey("stocks.id", ondelete="CASCADE"), primary_key=True,
        ),
    )
    op.create_index("ix_exchange_members_stock_id", "exchange_members", ["stock_id"])

    op.create_table(
        "stock_price_history",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "stock_id", sa.Integer,
            sa.ForeignKey("stocks.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("price", sa.Numeric(19, 4), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_stock_price_history_stock_ts", "stock_price_history",
        ["stock_id", "timestamp"],
    )


def downgrade() -> None:
    op.drop_index("ix_stock_price_history_stock_ts", table_name="stock_price_history")
    op.drop_table("stock_price_history")
    op.drop_index("ix_exchange_members_stock_id", table_name="exchange_members")
    op.drop_table("exchange_members")
    op.drop_table("exchanges")
    op.drop_table("stocks")
