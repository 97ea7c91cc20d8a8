"""initial pcb inventory schema

Revision ID: 3f9a1c2b7d10
Revises:
Create Date: 2026-09-28
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f9a1c2b7d10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "components",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("part_number", sa.String(100), nullable=False, unique=True),
        sa.Column("current_stock", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("monthly_required_quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_table(
        "pcbs",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("pcb_name", sa.String(255), nullable=False, unique=True),
        sa.Column("description", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_table(
        "pcb_components",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("pcb_id", sa.BigInteger(), sa.ForeignKey("pcbs.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "component_id",
            sa.BigInteger(),
            sa.ForeignKey("components.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("quantity_required", sa.Integer(), nullable=False),
        sa.UniqueConstraint("pcb_id", "component_id", name="uq_pcb_component"),
        sa.CheckConstraint("quantity_required > 0", name="ck_pcb_component_qty_pos"),
    )
    op.create_index("ix_pcb_components_pcb_id", "pcb_components", ["pcb_id"])

    op.create_table(
        "production_entries",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("pcb_id", sa.BigInteger(), sa.ForeignKey("pcbs.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("quantity_produced", sa.Integer(), nullable=False),
        sa.Column("production_date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("quantity_produced > 0", name="ck_production_qty_pos"),
    )
    op.create_index("ix_production_entries_pcb_id", "production_entries", ["pcb_id"])

    op.create_table(
        "consumption_history",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column(
            "component_id",
            sa.BigInteger(),
            sa.ForeignKey("components.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("pcb_id", sa.BigInteger(), sa.ForeignKey("pcbs.id", ondelete="RESTRICT"), nullable=False),
        sa.Column(
            "production_entry_id",
            sa.BigInteger(),
            sa.ForeignKey("production_entries.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("quantity_used", sa.Integer(), nullable=False),
        sa.Column("consumed_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("quantity_used > 0", name="ck_consumption_qty_pos"),
    )
    op.create_index("ix_consumption_history_production_entry_id", "consumption_history", ["production_entry_id"])
    op.create_index("ix_consumption_component_time", "consumption_history", ["component_id", "consumed_at"])

    trigger_status = sa.Enum("OPEN", "CLOSED", name="trigger_status")
    op.create_table(
        "procurement_triggers",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column(
            "component_id",
            sa.BigInteger(),
            sa.ForeignKey("components.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("status", trigger_status, nullable=False, server_default="OPEN"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("procurement_triggers")
    op.drop_index("ix_consumption_component_time", table_name="consumption_history")
    op.drop_index("ix_consumption_history_production_entry_id", table_name="consumption_history")
    op.drop_table("consumption_history")
    op.drop_index("ix_production_entries_pcb_id", table_name="production_entries")
    op.drop_table("production_entries")
    op.drop_index("ix_pcb_components_pcb_id", table_name="pcb_components")
    op.drop_table("pcb_components")
    op.drop_table("pcbs")
    op.drop_table("components")
    sa.Enum(name="trigger_status").drop(op.get_bind(), checkfirst=True)
