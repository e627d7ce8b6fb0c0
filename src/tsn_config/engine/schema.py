"""Data models for topology fan-out and its aggregate outcome."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Protocol

from ..plugins.base import DeviceModel, ManagementInfo


@dataclass(frozen=True)
class Port:
    """One bridge port of a node."""
    name: str


@dataclass
class Node:
    """One managed device in the topology."""
    id: str
    management: ManagementInfo
    ports: list[Port] = field(default_factory=list)


@dataclass
class Topology:
    """Ordered set of nodes to configure."""
    nodes: list[Node] = field(default_factory=list)

    def get_node(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None


class DeviceModelSource(Protocol):
    """Anything that can report the installed schema modules of a node."""

    def get_device_model(self, node_id: str) -> DeviceModel:
        ...


class TargetStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"


class OutcomeStatus(str, Enum):
    """Aggregate status of one orchestration run."""
    APPLIED = "applied"
    PARTIALLY_APPLIED = "partially_applied"
    NOT_APPLIED = "not_applied"


@dataclass
class TargetResult:
    """Result of one (node, port) push."""
    node_id: str
    interface: str
    status: TargetStatus
    plugin: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None
    duration_ms: float = 0.0
    # Rendered payload, dry runs only
    payload: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == TargetStatus.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "node_id": self.node_id,
            "interface": self.interface,
            "status": self.status.value,
            "plugin": self.plugin,
            "duration_ms": round(self.duration_ms, 2),
        }
        if self.error:
            result["error"] = self.error
            result["error_kind"] = self.error_kind
        if self.payload is not None:
            result["payload"] = self.payload
        return result


@dataclass
class ApplyOutcome:
    """Aggregate outcome of applying one intent across a topology."""
    status: OutcomeStatus
    results: list[TargetResult] = field(default_factory=list)
    skipped_nodes: list[str] = field(default_factory=list)
    # Set when the run could not be resolved at all
    error: Optional[str] = None
    dry_run: bool = False

    @classmethod
    def from_results(
        cls,
        results: list[TargetResult],
        skipped_nodes: Optional[list[str]] = None,
        dry_run: bool = False,
    ) -> "ApplyOutcome":
        succeeded = sum(1 for r in results if r.ok)
        if results and succeeded == len(results):
            status = OutcomeStatus.APPLIED
        elif succeeded:
            status = OutcomeStatus.PARTIALLY_APPLIED
        else:
            status = OutcomeStatus.NOT_APPLIED
        return cls(
            status=status,
            results=results,
            skipped_nodes=list(skipped_nodes or []),
            dry_run=dry_run,
        )

    @classmethod
    def unresolved(cls, error: str) -> "ApplyOutcome":
        return cls(status=OutcomeStatus.NOT_APPLIED, error=error)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.status == TargetStatus.SUCCESS)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.status == TargetStatus.FAILED)

    @property
    def cancelled(self) -> int:
        return sum(1 for r in self.results if r.status == TargetStatus.CANCELLED)

    @property
    def failures(self) -> list[TargetResult]:
        return [r for r in self.results if not r.ok]

    def summary(self) -> str:
        if self.error:
            return f"Not applied: {self.error}"
        prefix = "Dry run: " if self.dry_run else ""
        if self.status == OutcomeStatus.APPLIED:
            text = f"Applied to {self.total} target(s)"
        elif self.status == OutcomeStatus.PARTIALLY_APPLIED:
            text = (
                f"Partially applied: {self.total - self.succeeded}/{self.total} targets failed"
            )
        elif self.total == 0:
            text = "Not applied: no targets"
        else:
            text = f"Not applied: all {self.total} target(s) failed"
        if self.cancelled:
            text += f" ({self.cancelled} cancelled)"
        if self.skipped_nodes:
            text += f"; skipped nodes: {', '.join(self.skipped_nodes)}"
        return prefix + text

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "summary": self.summary(),
            "dry_run": self.dry_run,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "cancelled": self.cancelled,
            "skipped_nodes": list(self.skipped_nodes),
            "error": self.error,
            "results": [r.to_dict() for r in self.results],
        }
