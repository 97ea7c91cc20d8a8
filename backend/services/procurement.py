"""
Procurement service.

Ouvre les signaux de réappro (procurement_triggers) après une consommation.
Ne touche JAMAIS au stock : la logique stock est centralisée dans
    backend.services.inventory

Fermer un trigger est l'affaire du module achats, pas d'ici.
"""

from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.core.config import PROCUREMENT_THRESHOLD_RATIO
from backend.app.db.models.core_types import TriggerStatus
from backend.app.db.models.models_v1 import Component, ProcurementTrigger
from backend.services.feasibility import PlannedConsumption

logger = logging.getLogger(__name__)


def reorder_threshold(component: Component, ratio: float = PROCUREMENT_THRESHOLD_RATIO) -> float:
    return ratio * component.monthly_required_quantity


def has_open_trigger(db: Session, component_id: int) -> bool:
    return (
        db.execute(
            select(ProcurementTrigger.id)
            .where(ProcurementTrigger.component_id == component_id)
            .where(ProcurementTrigger.status == TriggerStatus.open)
        ).first()
        is not None
    )


def raise_procurement_triggers(
    db: Session,
    plan: Sequence[PlannedConsumption],
    *,
    ratio: float = PROCUREMENT_THRESHOLD_RATIO,
) -> list[int]:
    """
    Pour chaque composant consommé (stock déjà décrémenté) :
        si current_stock < ratio x monthly_required_quantity
        et aucun trigger OPEN → on en ouvre un.

    Idempotent : le composant est verrouillé par l'appelant, donc le
    check-then-insert ne peut pas être doublé. L'index unique partiel
    uq_procurement_trigger_open reste le filet côté base.
    """
    opened: list[int] = []

    for item in plan:
        comp = item.component
        threshold = reorder_threshold(comp, ratio)
        if comp.current_stock >= threshold:
            continue
        if has_open_trigger(db, item.component_id):
            continue

        db.add(ProcurementTrigger(component_id=item.component_id, status=TriggerStatus.open))
        opened.append(item.component_id)
        logger.info(
            "Procurement trigger opened for component %s (stock=%s < threshold=%s)",
            comp.part_number,
            comp.current_stock,
            threshold,
        )

    if opened:
        db.flush()
    return opened
