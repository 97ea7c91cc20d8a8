import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from backend.app.db.models.core_types import FailureKind, TriggerStatus
from backend.app.db.models.models_v1 import Component, ProcurementTrigger
from backend.services.procurement import reorder_threshold
from backend.services.production import record_production
from backend.tests.factories import make_board, make_component


def _open_triggers(db, component_id: int) -> int:
    return db.scalar(
        select(func.count())
        .select_from(ProcurementTrigger)
        .where(ProcurementTrigger.component_id == component_id)
        .where(ProcurementTrigger.status == TriggerStatus.open)
    )


def test_trigger_opened_once_when_stock_drops_below_threshold(db_session, locker):
    """
    GIVEN W monthly 500 (seuil 100), stock 110
    WHEN une production fait passer W à 90
    THEN un seul trigger OPEN ; une 2e production ne le duplique pas
    """
    w = make_component(db_session, stock=110, monthly=500)
    board = make_board(db_session, [(w, 20)])
    db_session.commit()

    first = record_production(db_session, board.id, 1, locker=locker)

    assert first.ok
    assert first.triggers_opened == (w.id,)
    db_session.refresh(w)
    assert w.current_stock == 90
    assert _open_triggers(db_session, w.id) == 1

    second = record_production(db_session, board.id, 1, locker=locker)

    assert second.ok
    assert second.triggers_opened == ()
    assert _open_triggers(db_session, w.id) == 1


def test_stock_equal_to_threshold_does_not_trigger(db_session, locker):
    w = make_component(db_session, stock=120, monthly=500)
    board = make_board(db_session, [(w, 20)])
    db_session.commit()

    outcome = record_production(db_session, board.id, 1, locker=locker)

    assert outcome.triggers_opened == ()
    assert _open_triggers(db_session, w.id) == 0


def test_closed_trigger_does_not_block_a_new_one(db_session, locker):
    w = make_component(db_session, stock=50, monthly=500)
    db_session.add(ProcurementTrigger(component_id=w.id, status=TriggerStatus.closed))
    board = make_board(db_session, [(w, 10)])
    db_session.commit()

    outcome = record_production(db_session, board.id, 1, locker=locker)

    assert outcome.triggers_opened == (w.id,)
    assert _open_triggers(db_session, w.id) == 1
    assert db_session.scalar(select(func.count()).select_from(ProcurementTrigger)) == 2


def test_only_depleted_components_get_a_trigger(db_session, locker):
    low = make_component(db_session, stock=25, monthly=100)
    high = make_component(db_session, stock=1000, monthly=100)
    no_target = make_component(db_session, stock=5, monthly=0)
    board = make_board(db_session, [(low, 10), (high, 10), (no_target, 5)])
    db_session.commit()

    outcome = record_production(db_session, board.id, 1, locker=locker)

    # low: 15 < 20 ; high: 990 ; no_target: 0 >= 0
    assert outcome.triggers_opened == (low.id,)
    assert _open_triggers(db_session, high.id) == 0
    assert _open_triggers(db_session, no_target.id) == 0


def test_refused_production_opens_no_trigger(db_session, locker):
    w = make_component(db_session, stock=10, monthly=500)
    board = make_board(db_session, [(w, 20)])
    db_session.commit()

    outcome = record_production(db_session, board.id, 1, locker=locker)

    assert outcome.kind == FailureKind.insufficient_stock
    assert _open_triggers(db_session, w.id) == 0


def test_reorder_threshold_uses_ratio_of_monthly_need():
    comp = Component(name="R", part_number="R-1", current_stock=0, monthly_required_quantity=500)

    assert reorder_threshold(comp) == pytest.approx(100)
    assert reorder_threshold(comp, ratio=0.5) == pytest.approx(250)


def test_database_rejects_second_open_trigger(db_session):
    w = make_component(db_session, stock=0, monthly=10)
    db_session.add(ProcurementTrigger(component_id=w.id, status=TriggerStatus.open))
    db_session.commit()

    db_session.add(ProcurementTrigger(component_id=w.id, status=TriggerStatus.open))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()

    assert _open_triggers(db_session, w.id) == 1
