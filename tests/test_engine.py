"""Tests for the orchestration engine and push executor."""
import threading

import pytest

from tsn_config.backends import BackendRegistry, NetconfBackend
from tsn_config.config.settings import Settings
from tsn_config.engine import (
    ApplyOutcome,
    Node,
    OrchestrationEngine,
    OutcomeStatus,
    Port,
    PushExecutor,
    TargetResult,
    TargetStatus,
    Topology,
)
from tsn_config.errors import StoreError
from tsn_config.intent import GateControlEntry, GateControlSchedule
from tsn_config.plugins import DeviceModel, LegacyQbvNetconfPlugin, ManagementInfo, QbvNetconfPlugin


class FakeDeviceModels:
    """Device models per node; exceptions are raised on lookup."""

    def __init__(self, models):
        self.models = models
        self.calls = []

    def get_device_model(self, node_id):
        self.calls.append(node_id)
        value = self.models[node_id]
        if isinstance(value, Exception):
            raise value
        return value


def make_registry(session_factory):
    registry = BackendRegistry()
    registry.register("netconf", NetconfBackend([
        QbvNetconfPlugin(session_factory=session_factory),
        LegacyQbvNetconfPlugin(session_factory=session_factory),
    ]))
    return registry


@pytest.fixture
def topology():
    """Three NETCONF targets on two nodes plus one unmanaged node."""
    return Topology(nodes=[
        Node(
            id="bridge-1",
            management=ManagementInfo(ip_address="192.0.2.1", username="admin", password="pw"),
            ports=[Port("sw0p1"), Port("sw0p2")],
        ),
        Node(
            id="bridge-2",
            management=ManagementInfo(ip_address="192.0.2.2", username="admin", password="pw"),
            ports=[Port("sw0p1")],
        ),
        Node(
            id="legacy-snmp",
            management=ManagementInfo(ip_address="192.0.2.3", protocol="snmp"),
            ports=[Port("eth0")],
        ),
    ])


@pytest.fixture
def audit_records(monkeypatch):
    records = []
    monkeypatch.setattr(
        "tsn_config.engine.engine.record_push",
        lambda **kwargs: records.append(kwargs),
    )
    return records


def make_engine(session_factory, models, max_workers=4):
    return OrchestrationEngine(
        make_registry(session_factory),
        FakeDeviceModels(models),
        Settings(max_workers=max_workers),
    )


class TestApplyTopologyConfig:
    """Tests for OrchestrationEngine.apply_topology_config."""

    @pytest.mark.asyncio
    async def test_all_targets_applied(self, schedule, topology, standard_model, session_factory, audit_records):
        """Every managed port receives the payload."""
        engine = make_engine(session_factory, {"bridge-1": standard_model, "bridge-2": standard_model})
        outcome = await engine.apply_topology_config(schedule, topology)

        assert outcome.status == OutcomeStatus.APPLIED
        assert outcome.total == outcome.succeeded == 3
        assert outcome.skipped_nodes == ["legacy-snmp"]
        assert session_factory.pushed_labels == ["bridge-1/sw0p1", "bridge-1/sw0p2", "bridge-2/sw0p1"]
        assert all(r.plugin == "qbv-netconf" for r in outcome.results)
        assert len(audit_records) == 3

    @pytest.mark.asyncio
    async def test_failure_isolated(self, schedule, topology, standard_model, make_session_factory, audit_records):
        """A failing second target does not stop the others."""
        factory = make_session_factory(failing={"bridge-1/sw0p2"})
        engine = make_engine(factory, {"bridge-1": standard_model, "bridge-2": standard_model})
        outcome = await engine.apply_topology_config(schedule, topology)

        assert outcome.status == OutcomeStatus.PARTIALLY_APPLIED
        assert outcome.succeeded == 2
        assert outcome.failed == 1
        failure = outcome.failures[0]
        assert (failure.node_id, failure.interface) == ("bridge-1", "sw0p2")
        assert failure.error_kind == "TransportError"
        assert "qbv-netconf" in failure.error
        assert factory.pushed_labels == ["bridge-1/sw0p1", "bridge-2/sw0p1"]
        assert "1/3 targets failed" in outcome.summary()
        statuses = {(r["node_id"], r["interface"]): r["status"] for r in audit_records}
        assert statuses[("bridge-1", "sw0p2")] == "failed"

    @pytest.mark.asyncio
    async def test_results_in_topology_order(self, schedule, topology, standard_model, session_factory, audit_records):
        """Results follow node then port order regardless of completion order."""
        engine = make_engine(session_factory, {"bridge-1": standard_model, "bridge-2": standard_model})
        outcome = await engine.apply_topology_config(schedule, topology)
        assert [(r.node_id, r.interface) for r in outcome.results] == [
            ("bridge-1", "sw0p1"), ("bridge-1", "sw0p2"), ("bridge-2", "sw0p1"),
        ]

    @pytest.mark.asyncio
    async def test_device_model_fetched_once_per_node(self, schedule, topology, standard_model, session_factory, audit_records):
        """Two ports on one node share one model lookup."""
        engine = make_engine(session_factory, {"bridge-1": standard_model, "bridge-2": standard_model})
        await engine.apply_topology_config(schedule, topology)
        assert engine.device_models.calls == ["bridge-1", "bridge-2"]

    @pytest.mark.asyncio
    async def test_store_error_fails_only_that_node(self, schedule, topology, standard_model, session_factory, audit_records):
        """An unavailable device model fails that node's targets only."""
        engine = make_engine(session_factory, {
            "bridge-1": StoreError("registry timeout"),
            "bridge-2": standard_model,
        })
        outcome = await engine.apply_topology_config(schedule, topology)

        assert outcome.status == OutcomeStatus.PARTIALLY_APPLIED
        by_node = {(r.node_id, r.interface): r for r in outcome.results}
        assert by_node[("bridge-1", "sw0p1")].error_kind == "StoreError"
        assert by_node[("bridge-1", "sw0p2")].status == TargetStatus.FAILED
        assert by_node[("bridge-2", "sw0p1")].ok
        assert session_factory.pushed_labels == ["bridge-2/sw0p1"]

    @pytest.mark.asyncio
    async def test_mixed_schema_versions(self, topology, legacy_model, standard_model, session_factory, audit_records):
        """Each node gets the variant matching its modules."""
        schedule = GateControlSchedule(
            schedule_id="2ms",
            base_time_ns=0,
            cycle_time_ns=2_000_000,
            entries=(GateControlEntry(index=0, time_interval_ns=2_000_000, gate_states=b"\x01"),),
        )
        engine = make_engine(session_factory, {"bridge-1": standard_model, "bridge-2": legacy_model})
        outcome = await engine.apply_topology_config(schedule, topology)
        plugins = {r.node_id: r.plugin for r in outcome.results}
        assert plugins == {"bridge-1": "qbv-netconf", "bridge-2": "qbv-netconf-legacy"}

    @pytest.mark.asyncio
    async def test_unsupported_device(self, schedule, topology, standard_model, session_factory, audit_records):
        """A device without matching modules fails with UnsupportedFeatureError."""
        engine = make_engine(session_factory, {"bridge-1": standard_model, "bridge-2": DeviceModel()})
        outcome = await engine.apply_topology_config(schedule, topology)
        failure = outcome.failures[0]
        assert failure.node_id == "bridge-2"
        assert failure.error_kind == "UnsupportedFeatureError"

    @pytest.mark.asyncio
    async def test_all_failed_is_not_applied(self, schedule, topology, legacy_model, session_factory, audit_records):
        """No successful target means not applied."""
        # 500us is not representable on legacy devices
        engine = make_engine(session_factory, {"bridge-1": legacy_model, "bridge-2": legacy_model})
        outcome = await engine.apply_topology_config(schedule, topology)
        assert outcome.status == OutcomeStatus.NOT_APPLIED
        assert outcome.failed == 3
        assert all(r.error_kind == "MappingError" for r in outcome.results)
        assert session_factory.sessions == []

    @pytest.mark.asyncio
    async def test_no_targets(self, schedule, session_factory, audit_records):
        """An empty topology is not applied."""
        engine = make_engine(session_factory, {})
        outcome = await engine.apply_topology_config(schedule, Topology())
        assert outcome.status == OutcomeStatus.NOT_APPLIED
        assert outcome.total == 0
        assert "no targets" in outcome.summary()

    @pytest.mark.asyncio
    async def test_missing_intent(self, topology, session_factory, audit_records):
        """A missing intent cannot be resolved."""
        engine = make_engine(session_factory, {})
        outcome = await engine.apply_topology_config(None, topology)
        assert outcome.status == OutcomeStatus.NOT_APPLIED
        assert outcome.error

    @pytest.mark.asyncio
    async def test_dry_run_renders_only(self, schedule, topology, standard_model, session_factory, audit_records):
        """Dry run returns payloads without opening sessions."""
        engine = make_engine(session_factory, {"bridge-1": standard_model, "bridge-2": standard_model})
        outcome = await engine.apply_topology_config(schedule, topology, dry_run=True)

        assert outcome.status == OutcomeStatus.APPLIED
        assert outcome.dry_run
        assert session_factory.sessions == []
        assert all("<gate-parameter-table" in r.payload for r in outcome.results)
        assert all(r.plugin == "qbv-netconf" for r in outcome.results)
        assert all(record["dry_run"] for record in audit_records)
        assert outcome.summary().startswith("Dry run: ")

    @pytest.mark.asyncio
    async def test_cancelled_before_start(self, schedule, topology, standard_model, session_factory, audit_records):
        """A pre-set cancel event starts no pushes."""
        engine = make_engine(session_factory, {"bridge-1": standard_model, "bridge-2": standard_model})
        cancel = threading.Event()
        cancel.set()
        outcome = await engine.apply_topology_config(schedule, topology, cancel_event=cancel)

        assert outcome.status == OutcomeStatus.NOT_APPLIED
        assert outcome.cancelled == 3
        assert session_factory.sessions == []
        assert [r["status"] for r in audit_records] == ["cancelled"] * 3

    @pytest.mark.asyncio
    async def test_cancel_mid_run(self, schedule, topology, standard_model, audit_records):
        """Cancelling during a run lets the in-flight push finish and skips the rest."""
        cancel = threading.Event()
        pushed = []

        class CancellingSession:
            def __init__(self, target, settings=None):
                self.target = target

            def edit_config(self, payload):
                pushed.append(self.target.label)
                cancel.set()

            def __enter__(self):
                return self

            def __exit__(self, *exc):
                return None

        engine = make_engine(
            CancellingSession,
            {"bridge-1": standard_model, "bridge-2": standard_model},
            max_workers=1,
        )
        outcome = await engine.apply_topology_config(schedule, topology, cancel_event=cancel)

        assert pushed == ["bridge-1/sw0p1"]
        assert outcome.status == OutcomeStatus.PARTIALLY_APPLIED
        assert outcome.succeeded == 1
        assert outcome.cancelled == 2

    @pytest.mark.asyncio
    async def test_unexpected_exception_contained(self, schedule, topology, standard_model, audit_records):
        """Non-library exceptions become failed results."""

        def exploding_factory(target, settings=None):
            raise RuntimeError("boom")

        engine = make_engine(exploding_factory, {"bridge-1": standard_model, "bridge-2": standard_model})
        outcome = await engine.apply_topology_config(schedule, topology)
        assert outcome.failed == 3
        assert outcome.results[0].error_kind == "RuntimeError"
        assert outcome.results[0].error == "boom"


class TestApplyOutcome:
    """Tests for ApplyOutcome aggregation."""

    def test_to_dict(self):
        """Serialized outcome carries counters and per-target results."""
        outcome = ApplyOutcome.from_results([
            TargetResult("n1", "p1", TargetStatus.SUCCESS, plugin="qbv-netconf"),
            TargetResult("n1", "p2", TargetStatus.FAILED, error="timeout", error_kind="TransportError"),
        ])
        data = outcome.to_dict()
        assert data["status"] == "partially_applied"
        assert data["succeeded"] == 1
        assert data["failed"] == 1
        assert data["results"][1]["error_kind"] == "TransportError"
        assert "error" not in data["results"][0]

    def test_unresolved(self):
        """Unresolved outcomes carry the reason."""
        outcome = ApplyOutcome.unresolved("NotFoundError: Unknown configuration: x")
        assert outcome.status == OutcomeStatus.NOT_APPLIED
        assert outcome.summary() == "Not applied: NotFoundError: Unknown configuration: x"


class TestPushExecutor:
    """Tests for PushExecutor."""

    def test_rejects_zero_workers(self):
        """At least one worker is required."""
        with pytest.raises(ValueError):
            PushExecutor(0)

    @pytest.mark.asyncio
    async def test_empty_job_list(self):
        """No jobs, no results."""
        assert await PushExecutor(2).run([], lambda job: None) == []
