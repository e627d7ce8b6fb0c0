"""Orchestration engine - topology fan-out with per-target failure isolation."""
from .schema import (
    Port,
    Node,
    Topology,
    DeviceModelSource,
    TargetStatus,
    OutcomeStatus,
    TargetResult,
    ApplyOutcome,
)
from .executor import PushExecutor, PushJob
from .engine import OrchestrationEngine

__all__ = [
    "Port",
    "Node",
    "Topology",
    "DeviceModelSource",
    "TargetStatus",
    "OutcomeStatus",
    "TargetResult",
    "ApplyOutcome",
    "PushExecutor",
    "PushJob",
    "OrchestrationEngine",
]
