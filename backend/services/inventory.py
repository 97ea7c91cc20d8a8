from __future__ import annotations

from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.db.models.models_v1 import Board, Component


def get_board(db: Session, board_id: int) -> Board | None:
    return db.get(Board, board_id)


def lock_components(db: Session, component_ids: Iterable[int]) -> dict[int, Component]:
    """
    Verrouille les lignes composants (FOR UPDATE) et retourne {id: Component}.

    Propriétés :
    - ordre d'acquisition déterministe (id croissant)
    - une seule requête pour tout le lot
    - populate_existing : on relit l'état commité, pas l'identity map
    - les ids absents du ledger sont simplement omis du résultat
    """

    ids = sorted({int(cid) for cid in component_ids if cid is not None})
    if not ids:
        return {}

    rows = (
        db.execute(
            select(Component)
            .where(Component.id.in_(ids))
            .order_by(Component.id.asc())
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        .scalars()
        .all()
    )
    return {int(c.id): c for c in rows}


def decrement_stock(component: Component, quantity: int) -> int:
    """Retire `quantity` du stock ; refuse de passer sous zéro."""
    if quantity <= 0:
        raise ValueError(f"Decrement must be positive (got {quantity})")
    new_stock = component.current_stock - quantity
    if new_stock < 0:
        raise ValueError(
            f"Stock of component {component.id} would go negative ({component.current_stock} - {quantity})"
        )
    component.current_stock = new_stock
    return new_stock
