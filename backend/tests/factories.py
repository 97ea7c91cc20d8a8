from __future__ import annotations

from itertools import count

from sqlalchemy.orm import Session

from backend.app.db.models.models_v1 import Board, BOMEntry, Component

_seq = count(1)


def make_component(
    db: Session,
    *,
    stock: int,
    monthly: int = 0,
    name: str | None = None,
) -> Component:
    n = next(_seq)
    comp = Component(
        name=name or f"TEST-COMP-{n}",
        part_number=f"TEST-PN-{n}",
        current_stock=stock,
        monthly_required_quantity=monthly,
    )
    db.add(comp)
    db.flush()
    return comp


def make_board(db: Session, bom: list[tuple[Component | int, int]] = ()) -> Board:
    """bom : [(composant ou id, qty par carte)] dans l'ordre d'insertion voulu."""
    board = Board(pcb_name=f"TEST-PCB-{next(_seq)}")
    db.add(board)
    db.flush()

    for comp, qty in bom:
        component_id = comp if isinstance(comp, int) else comp.id
        db.add(BOMEntry(pcb_id=board.id, component_id=component_id, quantity_required=qty))
        db.flush()
    return board
