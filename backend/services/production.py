"""
Enregistrement de production (RecordProduction).

RESOLVING → LOCKING → EVALUATING → DEDUCTING → RECORDING → TRIGGERING → COMMITTED
                                 ↘ ABORTED (manque de stock)
n'importe quelle étape           ↘ ABORTED (erreur)

Une seule transaction par appel, sur la session injectée : soit tout est
commité (stock, production_entries, consumption_history, triggers), soit rien.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from backend.app.core.config import PRODUCTION_LOCK_TIMEOUT
from backend.app.db.models.core_types import FailureKind, ProductionState
from backend.services.bom import resolve_bom
from backend.services.consumption import apply_deductions, record_consumption
from backend.services.feasibility import evaluate
from backend.services.inventory import get_board
from backend.services.locking import StockLocker, default_locker
from backend.services.outcomes import Failure, Outcome, ProductionAborted, Success
from backend.services.procurement import raise_procurement_triggers

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Failed to record production"


_TRANSITIONS: dict[ProductionState, set[ProductionState]] = {
    ProductionState.resolving: {ProductionState.locking},
    ProductionState.locking: {ProductionState.evaluating},
    ProductionState.evaluating: {ProductionState.deducting},
    ProductionState.deducting: {ProductionState.recording},
    ProductionState.recording: {ProductionState.triggering},
    ProductionState.triggering: {ProductionState.committed},
}
TERMINAL_STATES = {ProductionState.committed, ProductionState.aborted}


class ProductionRun:
    """Une exécution, un seul passage : pas de retour arrière, pas de ré-entrée."""

    def __init__(self, board_id: int, quantity_produced: int):
        self.board_id = board_id
        self.quantity_produced = quantity_produced
        self.state = ProductionState.resolving
        self.history: list[ProductionState] = [self.state]
        self.failure: Failure | None = None

    def advance(self, state: ProductionState) -> None:
        if state not in _TRANSITIONS.get(self.state, set()):
            raise RuntimeError(f"Illegal production transition {self.state.value} -> {state.value}")
        self._enter(state)

    def abort(self, failure: Failure) -> Failure:
        if self.state in TERMINAL_STATES:
            raise RuntimeError(f"Production run already {self.state.value}")
        self.failure = failure
        self._enter(ProductionState.aborted)
        return failure

    def _enter(self, state: ProductionState) -> None:
        logger.debug("pcb=%s qty=%s: %s -> %s", self.board_id, self.quantity_produced, self.state.value, state.value)
        self.state = state
        self.history.append(state)


def _is_positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def record_production(
    db: Session,
    board_id: int,
    quantity_produced: int,
    *,
    timeout: float | None = None,
    locker: StockLocker | None = None,
    run: ProductionRun | None = None,
) -> Outcome:
    """
    Consomme la nomenclature de `board_id` x `quantity_produced`.

    - board inconnue            → Failure(NOT_FOUND)
    - nomenclature vide         → Failure(NO_BOM_DEFINED)
    - un ou plusieurs manques   → Failure(INSUFFICIENT_STOCK, shortages=TOUS les manques)
    - quantité / id invalides   → Failure(INVALID_INPUT)
    - erreur DB / délai dépassé → Failure(INTERNAL_ERROR), rollback complet

    Pas de retry ici : c'est à l'appelant de décider.
    """

    if not _is_positive_int(board_id) or not _is_positive_int(quantity_produced):
        return Failure(
            FailureKind.invalid_input,
            "pcb_id and quantity_produced must be positive integers.",
        )

    locker = locker or default_locker
    if timeout is None:
        timeout = PRODUCTION_LOCK_TIMEOUT
    run = run or ProductionRun(board_id, quantity_produced)

    try:
        if get_board(db, board_id) is None:
            db.rollback()
            return run.abort(Failure(FailureKind.not_found, "PCB not found."))

        bom = resolve_bom(db, board_id)

        run.advance(ProductionState.locking)
        with locker.hold(db, (line.component_id for line in bom), timeout=timeout) as held:
            run.advance(ProductionState.evaluating)
            verdict = evaluate(bom, held, quantity_produced)

            if not verdict.feasible:
                db.rollback()
                logger.info(
                    "Production refused for pcb=%s qty=%s: %d component(s) short",
                    board_id,
                    quantity_produced,
                    len(verdict.shortages),
                )
                return run.abort(
                    Failure(
                        FailureKind.insufficient_stock,
                        "Insufficient stock for production.",
                        shortages=verdict.shortages,
                    )
                )

            run.advance(ProductionState.deducting)
            apply_deductions(verdict.plan)

            run.advance(ProductionState.recording)
            entry = record_consumption(
                db,
                board_id=board_id,
                quantity_produced=quantity_produced,
                plan=verdict.plan,
            )
            entry_id = int(entry.id)

            run.advance(ProductionState.triggering)
            opened = raise_procurement_triggers(db, verdict.plan)

            db.commit()
            run.advance(ProductionState.committed)

    except ProductionAborted as exc:
        db.rollback()
        logger.info("Production aborted for pcb=%s qty=%s: %s", board_id, quantity_produced, exc)
        # le détail interne reste dans les logs
        message = INTERNAL_ERROR_MESSAGE if exc.kind == FailureKind.internal_error else str(exc)
        return run.abort(Failure(exc.kind, message))
    except Exception:
        db.rollback()
        logger.exception("Error recording production for pcb=%s qty=%s", board_id, quantity_produced)
        return run.abort(Failure(FailureKind.internal_error, INTERNAL_ERROR_MESSAGE))

    logger.info(
        "Production %s recorded: pcb=%s qty=%s components=%d triggers=%s",
        entry_id,
        board_id,
        quantity_produced,
        len(verdict.plan),
        opened,
    )
    return Success(
        production_entry_id=entry_id,
        components_consumed=len(verdict.plan),
        triggers_opened=tuple(opened),
    )
