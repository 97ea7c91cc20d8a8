from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence

from backend.app.db.models.models_v1 import Component
from backend.services.bom import BOMLine
from backend.services.outcomes import Shortage


@dataclass(frozen=True)
class PlannedConsumption:
    component: Component
    required: int

    @property
    def component_id(self) -> int:
        return int(self.component.id)


@dataclass(frozen=True)
class Verdict:
    plan: tuple[PlannedConsumption, ...]
    shortages: tuple[Shortage, ...]

    @property
    def feasible(self) -> bool:
        return not self.shortages


def evaluate(
    bom: Sequence[BOMLine],
    held: Mapping[int, Component],
    quantity_produced: int,
) -> Verdict:
    """
    Vérifie le stock de TOUS les composants avant de décider.

    required = quantity_required x quantity_produced
    Un composant manque si current_stock < required. On ne s'arrête pas au
    premier manque : l'appelant reçoit la liste complète. Un composant de la
    nomenclature absent du ledger compte comme un manque (available = 0).
    """
    plan: list[PlannedConsumption] = []
    shortages: list[Shortage] = []

    for line in sorted(bom, key=lambda l: l.component_id):
        required = line.quantity_required * quantity_produced
        comp = held.get(line.component_id)

        if comp is None:
            shortages.append(
                Shortage(
                    component_id=line.component_id,
                    name="Unknown (deleted)",
                    available=0,
                    required=required,
                )
            )
            continue

        if comp.current_stock < required:
            shortages.append(
                Shortage(
                    component_id=int(comp.id),
                    name=comp.name,
                    part_number=comp.part_number,
                    available=comp.current_stock,
                    required=required,
                )
            )

        plan.append(PlannedConsumption(component=comp, required=required))

    return Verdict(plan=tuple(plan), shortages=tuple(shortages))
