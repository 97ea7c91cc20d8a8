import threading

import pytest
from sqlalchemy import update

from backend.app.db.models.core_types import FailureKind
from backend.app.db.models.models_v1 import Component
from backend.services.locking import StockLocker
from backend.services.outcomes import LockTimeout
from backend.services.production import record_production
from backend.tests.factories import make_board, make_component


class RecordingLocker(StockLocker):
    def __init__(self):
        super().__init__()
        self.order: list[int] = []

    def _acquire(self, component_id, deadline, timeout):
        self.order.append(component_id)
        return super()._acquire(component_id, deadline, timeout)


def test_components_locked_in_ascending_id_order(db_session):
    comps = [make_component(db_session, stock=10) for _ in range(3)]
    db_session.commit()
    ids = [c.id for c in comps]
    locker = RecordingLocker()

    with locker.hold(db_session, [ids[2], ids[0], ids[1], ids[0]]) as held:
        assert sorted(held) == sorted(ids)

    assert locker.order == sorted(ids)


def test_held_rows_are_reread_not_taken_from_identity_map(db_session, locker):
    c = make_component(db_session, stock=10)
    db_session.commit()
    assert c.current_stock == 10

    # UPDATE direct, l'objet en identity map garde 10
    db_session.execute(
        update(Component)
        .where(Component.id == c.id)
        .values(current_stock=7)
        .execution_options(synchronize_session=False)
    )

    with locker.hold(db_session, [c.id]) as held:
        assert held[c.id] is c
        assert c.current_stock == 7


def test_leases_released_after_error(db_session, locker):
    c = make_component(db_session, stock=10)
    db_session.commit()

    with pytest.raises(ValueError):
        with locker.hold(db_session, [c.id]):
            raise ValueError("boom")

    with locker.hold(db_session, [c.id], timeout=0.1) as held:
        assert c.id in held


def test_lock_wait_times_out(session_factory, locker):
    setup = session_factory()
    c = make_component(setup, stock=10)
    setup.commit()
    cid = c.id
    setup.close()

    holder = session_factory()
    errors: list[BaseException] = []

    def contender():
        db = session_factory()
        try:
            with locker.hold(db, [cid], timeout=0.1):
                pass
        except LockTimeout as exc:
            errors.append(exc)
        finally:
            db.close()

    with locker.hold(holder, [cid]):
        t = threading.Thread(target=contender)
        t.start()
        t.join(timeout=10)
    holder.close()

    assert len(errors) == 1
    assert errors[0].component_id == cid


def test_deadline_aborts_production_without_writes(session_factory, locker):
    setup = session_factory()
    c = make_component(setup, stock=100)
    board = make_board(setup, [(c, 10)])
    setup.commit()
    cid, board_id = c.id, board.id
    setup.close()

    outcomes = []

    def producer():
        db = session_factory()
        try:
            outcomes.append(record_production(db, board_id, 1, timeout=0.1, locker=locker))
        finally:
            db.close()

    holder = session_factory()
    with locker.hold(holder, [cid]):
        t = threading.Thread(target=producer)
        t.start()
        t.join(timeout=10)
    holder.close()

    (outcome,) = outcomes
    assert outcome.kind == FailureKind.internal_error
    assert outcome.message == "Failed to record production"

    check = session_factory()
    assert check.get(Component, cid).current_stock == 100
    check.close()
