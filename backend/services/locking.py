"""
Stock Locker.

Deux niveaux de verrou, toujours pris dans le même ordre (id composant croissant) :

1. un bail en mémoire par composant (threading.Lock) : les transactions du même
   process font la queue, y compris sur SQLite qui ignore FOR UPDATE ;
2. le verrou de ligne SQL (SELECT ... FOR UPDATE) : les autres process
   (workers uvicorn, scripts) bloquent aussi sur PostgreSQL.

Les lignes ne sont lues qu'une fois TOUT le lot tenu. Les baux sont rendus à la
sortie du bloc `with` : l'appelant doit donc commit / rollback à l'intérieur.
"""

from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from typing import Iterable, Iterator

from sqlalchemy import text
from sqlalchemy.orm import Session

from backend.app.db.models.models_v1 import Component
from backend.services.inventory import lock_components
from backend.services.outcomes import LockTimeout

logger = logging.getLogger(__name__)


class StockLocker:
    def __init__(self) -> None:
        self._guard = threading.Lock()
        # jamais purgé : borné par le nombre de composants distincts
        self._leases: dict[int, threading.Lock] = {}

    def _lease(self, component_id: int) -> threading.Lock:
        with self._guard:
            lease = self._leases.get(component_id)
            if lease is None:
                lease = self._leases[component_id] = threading.Lock()
            return lease

    def _acquire(self, component_id: int, deadline: float | None, timeout: float | None) -> threading.Lock:
        lease = self._lease(component_id)
        if deadline is None:
            lease.acquire()
            return lease

        remaining = deadline - time.monotonic()
        acquired = lease.acquire(timeout=remaining) if remaining > 0 else lease.acquire(blocking=False)
        if not acquired:
            raise LockTimeout(component_id, timeout)
        return lease

    @contextmanager
    def hold(
        self,
        db: Session,
        component_ids: Iterable[int],
        *,
        timeout: float | None = None,
    ) -> Iterator[dict[int, Component]]:
        ids = sorted({int(cid) for cid in component_ids})
        deadline = time.monotonic() + timeout if timeout is not None else None

        held: list[threading.Lock] = []
        try:
            for cid in ids:
                held.append(self._acquire(cid, deadline, timeout))
            logger.debug("Leases held on components %s", ids)

            if deadline is not None:
                _set_db_lock_timeout(db, max(deadline - time.monotonic(), 0.001))

            yield lock_components(db, ids)
        except BaseException:
            # rollback AVANT de rendre les baux : personne ne relit un stock non commité
            db.rollback()
            raise
        finally:
            for lease in reversed(held):
                lease.release()


def _set_db_lock_timeout(db: Session, seconds: float) -> None:
    # Postgres uniquement ; SET LOCAL meurt avec la transaction
    if db.get_bind().dialect.name != "postgresql":
        return
    db.execute(text(f"SET LOCAL lock_timeout = '{int(seconds * 1000)}ms'"))


# Registre de baux partagé par le process
default_locker = StockLocker()
