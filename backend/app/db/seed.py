from __future__ import annotations

import logging

from sqlalchemy import select

from backend.app.core.logging import configure_logging
from backend.app.db.session import SessionLocal
from backend.app.db.models.models_v1 import Board, BOMEntry, Component

logger = logging.getLogger(__name__)

# (part_number, name, current_stock, monthly_required_quantity, qty par carte)
DEMO_BOM = [
    ("RES-10K-0603", "Resistor 10k 0603", 5000, 10000, 12),
    ("CAP-100N-0402", "Capacitor 100nF 0402", 4000, 8000, 20),
    ("MCU-STM32F103", "STM32F103C8T6", 150, 400, 1),
    ("LDO-AMS1117-33", "AMS1117-3.3 regulator", 120, 300, 1),
]


def run_seed():
    db = SessionLocal()
    try:
        board = db.scalar(select(Board).where(Board.pcb_name == "DEMO-CTRL-V1"))
        if not board:
            board = Board(pcb_name="DEMO-CTRL-V1", description="Demo controller board")
            db.add(board)
            db.flush()

        for part_number, name, stock, monthly, per_board in DEMO_BOM:
            comp = db.scalar(select(Component).where(Component.part_number == part_number))
            if not comp:
                comp = Component(
                    name=name,
                    part_number=part_number,
                    current_stock=stock,
                    monthly_required_quantity=monthly,
                )
                db.add(comp)
                db.flush()

            row = db.scalar(
                select(BOMEntry)
                .where(BOMEntry.pcb_id == board.id)
                .where(BOMEntry.component_id == comp.id)
            )
            if not row:
                db.add(BOMEntry(pcb_id=board.id, component_id=comp.id, quantity_required=per_board))

        db.commit()
        logger.info("SEED OK: board=%s, %d components", board.pcb_name, len(DEMO_BOM))
    finally:
        db.close()


if __name__ == "__main__":
    configure_logging()
    run_seed()
