import enum

class TriggerStatus(str, enum.Enum):
    open = "OPEN"
    closed = "CLOSED"

class FailureKind(str, enum.Enum):
    not_found = "NOT_FOUND"
    no_bom_defined = "NO_BOM_DEFINED"
    insufficient_stock = "INSUFFICIENT_STOCK"
    invalid_input = "INVALID_INPUT"
    internal_error = "INTERNAL_ERROR"

class ProductionState(str, enum.Enum):
    resolving = "RESOLVING"
    locking = "LOCKING"
    evaluating = "EVALUATING"
    deducting = "DEDUCTING"
    recording = "RECORDING"
    triggering = "TRIGGERING"
    committed = "COMMITTED"
    aborted = "ABORTED"
