from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.db.models.models_v1 import BOMEntry
from backend.services.outcomes import NoBOMDefined


@dataclass(frozen=True)
class BOMLine:
    component_id: int
    quantity_required: int


def resolve_bom(db: Session, board_id: int) -> list[BOMLine]:
    """
    Nomenclature complète d'une carte.

    Lève NoBOMDefined si la carte n'a aucune ligne : on ne produit pas
    sans liste de composants connue.
    """
    rows = db.execute(
        select(BOMEntry.component_id, BOMEntry.quantity_required)
        .where(BOMEntry.pcb_id == board_id)
        .order_by(BOMEntry.id.asc())
    ).all()

    if not rows:
        raise NoBOMDefined(board_id)

    return [BOMLine(component_id=int(cid), quantity_required=int(qty)) for cid, qty in rows]
