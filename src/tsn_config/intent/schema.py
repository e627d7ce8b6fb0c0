"""Protocol-neutral intent messages.

Intent messages are produced upstream (store, RPC front end) and are never
mutated by the mapping pipeline, hence the frozen dataclasses.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Optional


class AdminState(str, Enum):
    """Administrative state of a gate-control schedule."""
    ENABLED = "enabled"
    DISABLED = "disabled"


class OperationName(str, Enum):
    """Gate operation attached to a gate-control entry."""
    SET_GATE_STATES = "set-gate-states"
    SET_AND_HOLD_MAC = "set-and-hold-mac"
    SET_AND_RELEASE_MAC = "set-and-release-mac"


@dataclass(frozen=True)
class GateControlEntry:
    """One time slot of a gate-control list."""
    index: int
    time_interval_ns: int
    # One bit per traffic class gate; only the first byte is representable
    gate_states: bytes = b""
    operation: Optional[OperationName] = None
    description: Optional[str] = None

    @property
    def effective_operation(self) -> OperationName:
        return self.operation or OperationName.SET_GATE_STATES


@dataclass(frozen=True)
class GateControlSchedule:
    """Time-aware shaper schedule to apply to bridge ports."""
    FEATURE: ClassVar[str] = "qbv"

    schedule_id: str
    base_time_ns: int
    cycle_time_ns: int
    admin_state: AdminState = AdminState.ENABLED
    entries: tuple[GateControlEntry, ...] = field(default_factory=tuple)
    interface_time_offset_ns: Optional[int] = None

    @property
    def feature(self) -> str:
        return self.FEATURE
