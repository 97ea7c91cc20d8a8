"""add components nonneg constraints + one OPEN trigger per component

Revision ID: 8c41e7d2a9b3
Revises: 3f9a1c2b7d10
Create Date: 2026-10-05
"""

from __future__ import annotations

from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8c41e7d2a9b3"
down_revision: Union[str, Sequence[str], None] = "3f9a1c2b7d10"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TABLE_NAME = "components"

CK_STOCK = "ck_component_stock_nonneg"
CK_MONTHLY = "ck_component_monthly_req_nonneg"

UQ_OPEN_TRIGGER = "uq_procurement_trigger_open"


def _add_check_if_missing(constraint_name: str, check_sql: str) -> None:
    # Idempotent Postgres
    op.execute(
        f"""
        DO $$
        BEGIN
            IF NOT EXISTS (
                SELECT 1
                FROM pg_constraint c
                JOIN pg_class t ON t.oid = c.conrelid
                WHERE t.relname = '{TABLE_NAME}'
                  AND c.conname = '{constraint_name}'
            ) THEN
                ALTER TABLE {TABLE_NAME}
                ADD CONSTRAINT {constraint_name}
                CHECK ({check_sql});
            END IF;
        END $$;
        """
    )


def upgrade() -> None:
    # Données sales éventuelles (import Excel) : on ramène à 0 pour ne pas bloquer la migration
    op.execute(f"UPDATE {TABLE_NAME} SET current_stock = 0 WHERE current_stock < 0;")
    op.execute(f"UPDATE {TABLE_NAME} SET monthly_required_quantity = 0 WHERE monthly_required_quantity < 0;")

    _add_check_if_missing(CK_STOCK, "current_stock >= 0")
    _add_check_if_missing(CK_MONTHLY, "monthly_required_quantity >= 0")

    # Doublons OPEN (ancienne version sans garde) : on garde le plus ancien
    op.execute(
        """
        UPDATE procurement_triggers t
        SET status = 'CLOSED'
        WHERE t.status = 'OPEN'
          AND EXISTS (
              SELECT 1 FROM procurement_triggers o
              WHERE o.component_id = t.component_id
                AND o.status = 'OPEN'
                AND o.id < t.id
          );
        """
    )
    op.execute(
        f"""
        CREATE UNIQUE INDEX IF NOT EXISTS {UQ_OPEN_TRIGGER}
        ON procurement_triggers (component_id)
        WHERE status = 'OPEN';
        """
    )


def downgrade() -> None:
    op.execute(f"DROP INDEX IF EXISTS {UQ_OPEN_TRIGGER};")
    op.execute(f"ALTER TABLE {TABLE_NAME} DROP CONSTRAINT IF EXISTS {CK_MONTHLY};")
    op.execute(f"ALTER TABLE {TABLE_NAME} DROP CONSTRAINT IF EXISTS {CK_STOCK};")
