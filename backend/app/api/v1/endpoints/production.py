from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.api.deps import get_db
from backend.app.db.models.core_types import FailureKind
from backend.app.db.models.models_v1 import Board, ConsumptionRecord, ProductionEntry
from backend.app.schemas.production import (
    ConsumptionRead,
    ProductionCreate,
    ProductionEntryRead,
    ProductionRecorded,
)
from backend.services.outcomes import Failure
from backend.services.production import record_production

router = APIRouter(prefix="/production")


FAILURE_STATUS = {
    FailureKind.not_found: 404,
    FailureKind.no_bom_defined: 400,
    FailureKind.insufficient_stock: 400,
    FailureKind.invalid_input: 422,
    FailureKind.internal_error: 500,
}


def _raise_failure(failure: Failure) -> None:
    detail: dict = {"error": failure.message, "kind": failure.kind.value}
    if failure.kind == FailureKind.insufficient_stock:
        detail["insufficient_components"] = [s.as_dict() for s in failure.shortages]
    raise HTTPException(status_code=FAILURE_STATUS[failure.kind], detail=detail)


@router.get("", response_model=list[ProductionEntryRead])
def list_production(db: Session = Depends(get_db)):
    rows = db.execute(
        select(ProductionEntry, Board.pcb_name)
        .outerjoin(Board, Board.id == ProductionEntry.pcb_id)
        .order_by(ProductionEntry.production_date.desc(), ProductionEntry.id.desc())
    ).all()
    return [
        ProductionEntryRead(
            id=pe.id,
            pcb_id=pe.pcb_id,
            pcb_name=pcb_name,
            quantity_produced=pe.quantity_produced,
            production_date=pe.production_date,
        )
        for pe, pcb_name in rows
    ]


@router.get("/{production_id}/consumption", response_model=list[ConsumptionRead])
def get_production_consumption(production_id: int, db: Session = Depends(get_db)):
    if not db.get(ProductionEntry, production_id):
        raise HTTPException(status_code=404, detail="Production entry not found")

    return (
        db.execute(
            select(ConsumptionRecord)
            .where(ConsumptionRecord.production_entry_id == production_id)
            .order_by(ConsumptionRecord.component_id)
        )
        .scalars()
        .all()
    )


@router.post("/add", response_model=ProductionRecorded)
def add_production(payload: ProductionCreate, db: Session = Depends(get_db)):
    outcome = record_production(db, payload.pcb_id, payload.quantity_produced)
    if not outcome.ok:
        _raise_failure(outcome)

    board = db.get(Board, payload.pcb_id)
    return ProductionRecorded(
        production_id=outcome.production_entry_id,
        pcb=board.pcb_name if board else "",
        quantity_produced=payload.quantity_produced,
        components_consumed=outcome.components_consumed,
        procurement_triggers_opened=list(outcome.triggers_opened),
    )
