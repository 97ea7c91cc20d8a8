"""
Résultats de l'enregistrement de production.

`record_production` ne lève jamais d'exception pour un refus métier :
il retourne un `Success` ou un `Failure` portant un `FailureKind`.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from backend.app.db.models.core_types import FailureKind


@dataclass(frozen=True)
class Shortage:
    component_id: int
    available: int
    required: int
    name: str | None = None
    part_number: str | None = None

    @property
    def deficit(self) -> int:
        return self.required - self.available

    def as_dict(self) -> dict:
        return {
            "component_id": self.component_id,
            "component": self.name,
            "part_number": self.part_number,
            "available": self.available,
            "required": self.required,
            "deficit": self.deficit,
        }


@dataclass(frozen=True)
class Success:
    production_entry_id: int
    components_consumed: int
    triggers_opened: tuple[int, ...] = ()

    ok = True


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    message: str
    shortages: tuple[Shortage, ...] = field(default_factory=tuple)

    ok = False


Outcome = Success | Failure


# ---------- Erreurs internes du pipeline ----------
class ProductionAborted(Exception):
    """Interruption d'une étape ; convertie en `Failure` par l'orchestrateur."""

    kind = FailureKind.internal_error


class NoBOMDefined(ProductionAborted):
    kind = FailureKind.no_bom_defined

    def __init__(self, board_id: int):
        super().__init__(f"No BOM found for PCB {board_id}. Import BOM first.")
        self.board_id = board_id


class LockTimeout(ProductionAborted):
    kind = FailureKind.internal_error

    def __init__(self, component_id: int, timeout: float):
        super().__init__(f"Timed out after {timeout}s waiting for component {component_id}")
        self.component_id = component_id
        self.timeout = timeout
