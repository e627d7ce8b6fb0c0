"""Intent model - protocol-neutral configuration messages."""
from .schema import AdminState, OperationName, GateControlEntry, GateControlSchedule
from .parser import IntentParser, compute_checksum
from .validator import IntentValidator, ValidationResult

__all__ = [
    "AdminState",
    "OperationName",
    "GateControlEntry",
    "GateControlSchedule",
    "IntentParser",
    "compute_checksum",
    "IntentValidator",
    "ValidationResult",
]
