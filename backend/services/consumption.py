from __future__ import annotations

from typing import Sequence

from sqlalchemy.orm import Session

from backend.app.db.models.models_v1 import ConsumptionRecord, ProductionEntry
from backend.services.feasibility import PlannedConsumption
from backend.services.inventory import decrement_stock


def apply_deductions(plan: Sequence[PlannedConsumption]) -> dict[int, int]:
    """
    Décrémente le stock de chaque composant tenu.
    Appelé uniquement après un verdict sans manque. Retourne {id: nouveau stock}.
    """
    return {item.component_id: decrement_stock(item.component, item.required) for item in plan}


def record_consumption(
    db: Session,
    *,
    board_id: int,
    quantity_produced: int,
    plan: Sequence[PlannedConsumption],
) -> ProductionEntry:
    entry = ProductionEntry(pcb_id=board_id, quantity_produced=quantity_produced)
    db.add(entry)
    db.flush()  # get entry.id

    for item in plan:
        db.add(
            ConsumptionRecord(
                component_id=item.component_id,
                pcb_id=board_id,
                production_entry_id=entry.id,
                quantity_used=item.required,
            )
        )
    db.flush()
    return entry
